import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class QueryBindError(Exception):
    """Base class for errors raised by querybind."""

    pass


class ConversionError(QueryBindError, ValueError):
    """A token could not be converted to the field's declared type."""

    def __init__(self, token: str, target: Any) -> None:
        self.token = token
        self.target = target
        super().__init__(f"invalid value '{token}'")


class UnsupportedTypeError(QueryBindError, TypeError):
    """A tagged field declares a type the binder cannot convert."""

    pass


class BindErrors(Dict[str, str]):
    """Ordered mapping of parameter key to error message for one bind pass.

    The binder records through :meth:`add`, which keeps the first message
    for a key. Sanitize hooks may use :meth:`add` or plain item assignment.
    """

    def add(self, key: str, message: str) -> bool:
        """Record ``message`` under ``key`` unless the key already has one."""
        if key in self:
            logger.debug("Ignoring second error for %r: %s", key, message)
            return False
        self[key] = message
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({dict.__repr__(self)})"
