from typing import Optional, Tuple

# querybind/tags.py
TAG_SEPARATOR = ","
SKIP_MARKER = "-"


def parse_tag(tag: Optional[str]) -> Tuple[str, str]:
    """Split a field tag into its parameter key and raw default string.

    The key is everything before the first separator and the defaults are
    everything after it, kept verbatim so list defaults can be split later
    with the same rules as request values.

    >>> parse_tag("name,1,2")
    ('name', '1,2')
    >>> parse_tag("-")
    ('', '')
    """
    if not tag:
        return "", ""

    key, _, defaults = tag.partition(TAG_SEPARATOR)
    if key == SKIP_MARKER:
        return "", ""
    return key, defaults


class QueryTag:
    """Marker placed in ``Annotated`` metadata to make a field bindable."""

    __slots__ = ("tag", "key", "defaults")

    def __init__(self, tag: str) -> None:
        if not isinstance(tag, str):
            raise TypeError(f"query tag must be a string, got {type(tag).__name__}")
        self.tag = tag
        self.key, self.defaults = parse_tag(tag)

    @property
    def bindable(self) -> bool:
        return bool(self.key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryTag):
            return NotImplemented
        return self.tag == other.tag

    def __hash__(self) -> int:
        return hash(self.tag)

    def __repr__(self) -> str:
        return f"query({self.tag!r})"


def query(tag: str) -> QueryTag:
    """Build the binding marker for a field, e.g. ``Annotated[int, query("page,1")]``."""
    return QueryTag(tag)
