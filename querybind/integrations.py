import logging
from typing import Callable, Type, TypeVar

from fastapi import HTTPException, Request

from .core import Query, bind

logger = logging.getLogger(__name__)

Q = TypeVar("Q", bound=Query)


def query_dependency(cls: Type[Q], status_code: int = 422) -> Callable[[Request], Q]:
    """Build a FastAPI dependency that binds the request's query string.

    The dependency returns a fresh ``cls`` instance, or raises
    ``HTTPException`` with the error mapping as ``detail`` when binding
    reported any error.

        @app.get("/search")
        def search(params: Search = Depends(query_dependency(Search))):
            ...
    """

    def dependency(request: Request) -> Q:
        record = cls()
        errors = bind(request.query_params, record)
        if errors:
            logger.info(
                f"Rejected {request.method} {request.url.path}: "
                f"invalid query parameter(s) {', '.join(errors)}"
            )
            raise HTTPException(status_code=status_code, detail=dict(errors))
        return record

    dependency.__name__ = f"bind_{cls.__name__}"
    return dependency
