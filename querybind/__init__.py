"""
querybind - Bind query string parameters into annotated record classes

Fields carry a ``query()`` tag naming the parameter key and optional
defaults. Values are converted by declared type, list fields are split on
commas, and every failure is collected per key instead of raised.

Example:
    from typing import Annotated, List
    from querybind import BindErrors, Query, query

    class Search(Query):
        text: Annotated[str, query("q")]
        page: Annotated[int, query("page,1")]
        tags: Annotated[List[str], query("tags,news,tech")]

        def sanitize_query(self, errors: BindErrors) -> None:
            if self.page < 1:
                errors.add("page", "page must be positive")

    search = Search()
    errors = search.bind("q=python&page=0")
    # search.text == "python", search.tags == ["news", "tech"]
    # errors == {"page": "page must be positive"}
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .convert import QueryDecodable, UInt, convert_list, convert_scalar
from .core import (
    FieldBinding,
    FieldKind,
    Query,
    QueryMeta,
    Sanitizable,
    bind,
    bind_fields,
)
from .errors import BindErrors, ConversionError, QueryBindError, UnsupportedTypeError
from .source import ParameterSource, QueryParams, as_source
from .tags import QueryTag, parse_tag, query

__all__ = [
    "Query",
    "QueryMeta",
    "query",
    "QueryTag",
    "parse_tag",
    "bind",
    "bind_fields",
    "FieldBinding",
    "FieldKind",
    "Sanitizable",
    "QueryDecodable",
    "UInt",
    "convert_scalar",
    "convert_list",
    "BindErrors",
    "QueryBindError",
    "ConversionError",
    "UnsupportedTypeError",
    "ParameterSource",
    "QueryParams",
    "as_source",
]
