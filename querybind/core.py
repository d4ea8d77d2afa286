import copy
import inspect
import logging
from enum import Enum
from typing import (
    Annotated,
    Any,
    ClassVar,
    Dict,
    List,
    NamedTuple,
    Optional,
    Protocol,
    Tuple,
    cast,
    get_args,
    get_origin,
    get_type_hints,
    runtime_checkable,
)

from .convert import convert_list, convert_scalar, scalar_parser, zero_value
from .errors import BindErrors, UnsupportedTypeError
from .source import ParameterSource, as_source
from .tags import QueryTag

logger = logging.getLogger(__name__)


# querybind/core.py
# --- Capabilities ---
@runtime_checkable
class Sanitizable(Protocol):
    """Record with a post-bind hook.

    ``sanitize_query`` runs after every field is bound, whether or not
    conversion errors were recorded, and may add entries to ``errors``.
    Hooks of embedded records are not called by the binder; the parent's
    hook calls them.
    """

    def sanitize_query(self, errors: BindErrors) -> None: ...


# --- Field Descriptor Table ---
class FieldKind(Enum):
    SCALAR = "scalar"
    LIST = "list"
    EMBEDDED = "embedded"


class FieldBinding(NamedTuple):
    """How one record attribute is filled from the parameter source."""

    name: str
    key: str
    defaults: str
    kind: FieldKind
    type: Any
    item_type: Any = None

    def convert(self, raw: str, delimiter: str) -> Any:
        if self.kind is FieldKind.LIST:
            return convert_list(self.item_type, raw, delimiter)
        return convert_scalar(self.type, raw)


def _is_record_type(t: Any) -> bool:
    return isinstance(t, type) and get_origin(t) is None and issubclass(t, Query)


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.split("[", 1)[0].strip() in ("ClassVar", "typing.ClassVar")
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _split_annotated(hint: Any) -> Tuple[Any, tuple]:
    if get_origin(hint) is Annotated:
        args = get_args(hint)
        return args[0], args[1:]
    return hint, ()


def _make_binding(owner: str, name: str, hint: Any) -> Optional[FieldBinding]:
    """Build the binding for one annotated attribute, or None if unbound."""
    field_type, metadata = _split_annotated(hint)
    tags = [m for m in metadata if isinstance(m, QueryTag)]
    if len(tags) > 1:
        raise UnsupportedTypeError(
            f"Field '{owner}.{name}' has more than one query tag"
        )

    if not tags:
        if _is_record_type(field_type):
            return FieldBinding(name, "", "", FieldKind.EMBEDDED, field_type)
        return None

    tag = tags[0]
    if not tag.bindable:
        return None

    if _is_record_type(field_type):
        raise UnsupportedTypeError(
            f"Field '{owner}.{name}' is a record; embed it without a query tag"
        )

    if get_origin(field_type) is list:
        args = get_args(field_type)
        item_type = args[0] if args else str
        if scalar_parser(item_type) is None:
            raise UnsupportedTypeError(
                f"Field '{owner}.{name}' has unsupported item type {item_type!r}"
            )
        return FieldBinding(
            name, tag.key, tag.defaults, FieldKind.LIST, field_type, item_type
        )

    if scalar_parser(field_type) is None:
        raise UnsupportedTypeError(
            f"Field '{owner}.{name}' has unsupported type {field_type!r}"
        )
    return FieldBinding(name, tag.key, tag.defaults, FieldKind.SCALAR, field_type)


def _initial_value(field_type: Any) -> Any:
    base, _ = _split_annotated(field_type)
    if get_origin(base) is list:
        return []
    if _is_record_type(base):
        return base()
    return zero_value(base)


# --- Metaclass ---
class QueryMeta(type):
    """Collects annotated fields and builds the binding table once per class."""

    def __new__(mcls, name: str, bases: tuple, namespace: dict) -> Any:
        cls = super().__new__(mcls, name, bases, namespace)
        cls_any = cast(Any, cls)

        fields: List[str] = []
        defaults: Dict[str, Any] = {}
        for base in bases:
            for f in getattr(base, "_fields", ()):
                if f not in fields:
                    fields.append(f)
            defaults.update(getattr(base, "_defaults", {}))

        own_annotations = {
            k: v
            for k, v in inspect.get_annotations(cls).items()
            if not _is_class_var(v)
        }
        fields.extend(k for k in own_annotations if k not in fields)

        for k in own_annotations:
            if k in cls.__dict__:
                defaults[k] = cls.__dict__[k]
                delattr(cls, k)

        cls_any._fields = fields
        cls_any._defaults = defaults
        cls_any._types = get_type_hints(cls, include_extras=True) if fields else {}

        bindings: List[FieldBinding] = []
        for field_name in fields:
            binding = _make_binding(name, field_name, cls_any._types[field_name])
            if binding is not None:
                bindings.append(binding)
        cls_any._bindings = tuple(bindings)

        return cls


# --- Main Query Class ---
class Query(metaclass=QueryMeta):
    """Base class for records bound from query parameters.

    Example:
        class Search(Query):
            text: Annotated[str, query("q")]
            page: Annotated[int, query("page,1")]

        search = Search()
        errors = search.bind("q=python")
    """

    # Separator for list values. Tags always use ",".
    delimiter = ","

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Initialize a record; unspecified fields get defaults or zero values."""
        cls_name = self.__class__.__name__

        invalid_fields = [k for k in kwargs if k not in self._fields]
        if invalid_fields:
            raise TypeError(
                f"Invalid field(s) for {cls_name}: {', '.join(invalid_fields)}. "
                f"Valid fields are: {', '.join(self._fields)}."
            )

        if len(args) > len(self._fields):
            raise TypeError(
                f"Too many arguments for {cls_name}. "
                f"Expected at most {len(self._fields)}, got {len(args)}."
            )

        assigned = dict(zip(self._fields, args))
        for name, value in kwargs.items():
            if name in assigned:
                raise TypeError(
                    f"Duplicate value for field '{name}' in {cls_name}."
                )
            assigned[name] = value

        for name in self._fields:
            if name in assigned:
                value = assigned[name]
            elif name in self._defaults:
                default = self._defaults[name]
                value = default() if callable(default) else copy.copy(default)
            else:
                value = _initial_value(self._types[name])
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._fields:
            raise AttributeError(
                f"'{self.__class__.__name__}' has no field '{name}'. "
                f"Valid fields are: {', '.join(self._fields)}."
            )
        object.__setattr__(self, name, value)

    # --- Binding ---
    def bind(self, source: Any) -> BindErrors:
        """Bind ``source`` into this record in place; see :func:`bind`."""
        return bind(source, self)

    @classmethod
    def from_query(cls, source: Any, **initial: Any) -> Tuple["Query", BindErrors]:
        """Create a record from ``initial`` values and bind ``source`` into it."""
        record = cls(**initial)
        return record, bind(source, record)

    @classmethod
    def get_bindings(cls) -> Tuple[FieldBinding, ...]:
        """Return the binding table, embedded records not expanded."""
        return cls._bindings

    # --- Equality and Representation ---
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to a dictionary, embedded records included."""
        d = {}
        for name in self._fields:
            value = getattr(self, name)
            if isinstance(value, Query):
                value = value.to_dict()
            elif isinstance(value, list):
                value = list(value)
            d[name] = value
        return d

    def __repr__(self) -> str:
        fields_str = ", ".join(f"{f}={getattr(self, f)!r}" for f in self._fields)
        return f"{self.__class__.__name__}({fields_str})"


# --- Field Binder ---
def _bind_field(
    record: Query, binding: FieldBinding, source: ParameterSource, errors: BindErrors
) -> None:
    raw = source.get(binding.key) if binding.key in source else None
    if not raw:
        if not binding.defaults:
            return
        logger.debug("Using default %r for %r", binding.defaults, binding.key)
        raw = binding.defaults

    try:
        value = binding.convert(raw, type(record).delimiter)
    except ValueError as e:
        message = str(e) or f"invalid value '{raw}'"
        logger.debug("Cannot bind %r from %r: %s", binding.key, raw, message)
        errors.add(binding.key, message)
        if binding.kind is FieldKind.LIST:
            setattr(record, binding.name, [])
        return

    setattr(record, binding.name, value)


def bind_fields(record: Query, source: ParameterSource, errors: BindErrors) -> None:
    """Fill every bindable field of ``record`` from ``source``.

    Conversion failures are recorded in ``errors`` and never stop the walk.
    Embedded records are bound in place, as if their fields were declared
    on ``record``.
    """
    for binding in record._bindings:
        if binding.kind is FieldKind.EMBEDDED:
            sub = getattr(record, binding.name)
            if sub is None:
                sub = binding.type()
                setattr(record, binding.name, sub)
            bind_fields(sub, source, errors)
        else:
            _bind_field(record, binding, source, errors)


# --- Bind Orchestrator ---
def bind(source: Any, target: Query) -> BindErrors:
    """Bind query parameters into ``target`` and run its sanitize hook.

    ``source`` is a query string, a mapping, or any :class:`ParameterSource`.
    Returns the collected errors; an empty mapping means every field bound
    cleanly. Bad input never raises; a source holding non-string values is
    a programming error and raises ``TypeError``.
    """
    if not isinstance(target, Query):
        raise TypeError(f"Expected a Query record, got {type(target).__name__}")

    params = as_source(source)
    errors = BindErrors()
    bind_fields(target, params, errors)

    if isinstance(target, Sanitizable):
        target.sanitize_query(errors)

    if errors:
        logger.debug(
            "Bound %s with %d error(s): %s",
            type(target).__name__,
            len(errors),
            ", ".join(errors),
        )
    return errors

