from typing import (
    Any,
    Dict,
    Iterator,
    Mapping,
    Optional,
    Protocol,
    runtime_checkable,
)
from urllib.parse import parse_qsl


@runtime_checkable
class ParameterSource(Protocol):
    """Read-only key/value provider the binder pulls values from.

    ``key in source`` tells "absent" apart from "present but empty".
    """

    def __contains__(self, key: object) -> bool: ...

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]: ...


class QueryParams(Mapping[str, str]):
    """Immutable single-valued view over query string parameters.

    Repeated keys keep their first value, blank values are kept so that
    ``?a=`` reports ``a`` as present with an empty value.
    """

    __slots__ = ("_params",)

    def __init__(self, params: Optional[Mapping[str, Any]] = None) -> None:
        self._params: Dict[str, str] = {}
        for key, value in (params or {}).items():
            if isinstance(value, (list, tuple)):
                # Multi-valued mappings such as parse_qs() output.
                if not value:
                    continue
                value = value[0]
            if not isinstance(value, str):
                raise TypeError(
                    f"Parameter '{key}' must be a string, got {type(value).__name__}"
                )
            self._params[key] = value

    @classmethod
    def parse(cls, query_string: str) -> "QueryParams":
        """Build parameters from a raw query string such as ``a=1&b=x,y``."""
        query_string = query_string.lstrip("?")
        params = cls()
        for key, value in parse_qsl(query_string, keep_blank_values=True):
            params._params.setdefault(key, value)
        return params

    def __getitem__(self, key: str) -> str:
        return self._params[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._params!r})"


def as_source(source: Any) -> ParameterSource:
    """Adapt a query string or mapping into a :class:`ParameterSource`.

    Every mapping is copied into :class:`QueryParams`, so values are checked
    to be strings and repeated keys keep their first value. Multi-dicts
    such as Starlette's ``QueryParams`` are read through ``getlist``.
    """
    if isinstance(source, str):
        return QueryParams.parse(source)
    if isinstance(source, QueryParams):
        return source
    if isinstance(source, Mapping):
        if hasattr(source, "getlist"):
            return QueryParams({key: source.getlist(key) for key in source})
        return QueryParams(source)
    if isinstance(source, ParameterSource):
        return source
    raise TypeError(
        f"Expected a query string, mapping or parameter source, got {type(source).__name__}"
    )
