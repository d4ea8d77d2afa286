"""
Type-directed conversion of query string tokens into field values.
"""

from typing import (
    Any,
    Callable,
    Dict,
    List,
    NewType,
    Optional,
    Protocol,
    get_origin,
    runtime_checkable,
)

from .errors import ConversionError

# Base-10 integer that rejects negative values.
UInt = NewType("UInt", int)

_TRUE_TOKENS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_TOKENS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


@runtime_checkable
class QueryDecodable(Protocol):
    """Type that decodes itself from a raw query token.

    ``unmarshal_query`` is a classmethod returning the decoded value. It
    raises ``ValueError`` with a human readable message on bad input; the
    message becomes the field's error.
    """

    @classmethod
    def unmarshal_query(cls, data: str) -> Any: ...


def is_decodable(typ: Any) -> bool:
    return (
        isinstance(typ, type)
        and get_origin(typ) is None
        and issubclass(typ, QueryDecodable)
    )


def _check_number(token: str, target: Any) -> None:
    # Python accepts padding and "_" separators; query values may not.
    if token != token.strip() or "_" in token:
        raise ConversionError(token, target)


def _parse_int(token: str) -> int:
    _check_number(token, int)
    try:
        return int(token, 10)
    except ValueError:
        raise ConversionError(token, int) from None


def _parse_uint(token: str) -> int:
    value = _parse_int(token)
    if value < 0:
        raise ConversionError(token, UInt)
    return value


def _parse_float(token: str) -> float:
    _check_number(token, float)
    try:
        return float(token)
    except ValueError:
        raise ConversionError(token, float) from None


def _parse_bool(token: str) -> bool:
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    raise ConversionError(token, bool)


_SCALAR_PARSERS: Dict[Any, Callable[[str], Any]] = {
    str: str,
    int: _parse_int,
    UInt: _parse_uint,
    float: _parse_float,
    bool: _parse_bool,
}


def scalar_parser(typ: Any) -> Optional[Callable[[str], Any]]:
    """Return the parser for ``typ``, or None when it cannot be converted."""
    if is_decodable(typ):
        return typ.unmarshal_query
    return _SCALAR_PARSERS.get(typ)


def convert_scalar(typ: Any, token: str) -> Any:
    """Convert a single token to ``typ``.

    Raises ``ValueError`` (``ConversionError`` for built-in types, whatever
    the type's ``unmarshal_query`` raised otherwise) when the token is bad.
    """
    parser = scalar_parser(typ)
    if parser is None:
        raise TypeError(f"Cannot convert query values to {typ!r}")
    return parser(token)


def convert_list(item_type: Any, raw: str, delimiter: str = ",") -> List[Any]:
    """Split ``raw`` on ``delimiter`` and convert every token to ``item_type``.

    Empty tokens are kept and converted like any other, so ``"1,,2"`` fails
    for ``int`` items while it yields an empty string for ``str`` items.
    """
    return [convert_scalar(item_type, token) for token in raw.split(delimiter)]


_ZERO_VALUES: Dict[Any, Any] = {
    str: "",
    int: 0,
    UInt: 0,
    float: 0.0,
    bool: False,
}


def zero_value(typ: Any) -> Any:
    """Initial value for a field that has no explicit or class default."""
    if typ in _ZERO_VALUES:
        return _ZERO_VALUES[typ]
    try:
        return typ()
    except TypeError:
        return None
