"""Tests for the FastAPI dependency."""

import logging
from typing import Annotated, List

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi import Depends, FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from querybind import Query, query  # noqa: E402
from querybind.integrations import query_dependency  # noqa: E402


class Listing(Query):
    page: Annotated[int, query("page,1")]
    size: Annotated[int, query("size,20")]
    tags: Annotated[List[str], query("tags")]

    def sanitize_query(self, errors):
        if self.size > 100:
            errors.add("size", "size must not exceed 100")


app = FastAPI()


@app.get("/items")
def list_items(params: Listing = Depends(query_dependency(Listing))):
    return params.to_dict()


client = TestClient(app)


class TestQueryDependency:
    """Test binding query strings in FastAPI routes."""

    def test_defaults(self):
        """Test a request without parameters gets the declared defaults."""
        response = client.get("/items")
        assert response.status_code == 200
        assert response.json() == {"page": 1, "size": 20, "tags": []}

    def test_values(self):
        """Test present parameters are converted."""
        response = client.get("/items?page=3&tags=a,b&size=")
        assert response.status_code == 200
        assert response.json() == {"page": 3, "size": 20, "tags": ["a", "b"]}

    def test_errors_rejected(self, caplog):
        """Test conversion and sanitize errors become a 422 response."""
        with caplog.at_level(logging.INFO, logger="querybind"):
            response = client.get("/items?page=x&size=500")

        assert response.status_code == 422
        assert response.json() == {
            "detail": {
                "page": "invalid value 'x'",
                "size": "size must not exceed 100",
            }
        }
        assert "Rejected GET /items" in caplog.text

    def test_repeated_key_first_value_wins(self):
        """Test a repeated parameter binds its first value, as bind() does."""
        response = client.get("/items?page=2&page=x")
        assert response.status_code == 200
        assert response.json()["page"] == 2

        data = Listing()
        assert data.bind("page=2&page=x") == {}
        assert data.page == 2

    def test_custom_status_code(self):
        """Test the rejection status can be changed."""
        strict = FastAPI()

        @strict.get("/items")
        def items(params: Listing = Depends(query_dependency(Listing, 400))):
            return params.to_dict()

        response = TestClient(strict).get("/items?page=x")
        assert response.status_code == 400
