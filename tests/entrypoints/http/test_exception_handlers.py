"""Tests for FastAPI exception handlers."""

import pytest
from fastapi import FastAPI, Query
from fastapi.testclient import TestClient

from apartment_catalog.domain.errors import (
    ApiRequestError,
    FilterValidationError,
    InternalError,
    NotFoundError,
    PagingValidationError,
)
from apartment_catalog.entrypoints.http.exception_handlers import register_exception_handlers


@pytest.fixture
def app() -> FastAPI:
    """Create a minimal FastAPI app with exception handlers registered."""
    test_app = FastAPI()
    register_exception_handlers(test_app)

    @test_app.get("/paging-error")
    def raise_paging_error() -> None:
        raise PagingValidationError("limit must be <= 100")

    @test_app.get("/filter-error-with-fields")
    def raise_filter_error_with_fields() -> None:
        raise FilterValidationError(
            errors=[
                {
                    "field": "priceMin",
                    "message": "priceMin cannot be greater than priceMax",
                    "code": "INVALID_RANGE",
                },
                {
                    "field": "rooms",
                    "message": "rooms must contain positive integers",
                    "code": "ROOMS_INVALID",
                },
            ]
        )

    @test_app.get("/not-found-error")
    def raise_not_found_error() -> None:
        raise NotFoundError("Apartment", "apt-404")

    @test_app.get("/unmapped-domain-error")
    def raise_unmapped_domain_error() -> None:
        raise ApiRequestError("Upstream unavailable")

    @test_app.get("/internal-error")
    def raise_internal_error() -> dict:
        raise InternalError("Cannot read apartments dataset")

    @test_app.get("/value-error")
    def raise_value_error() -> dict:
        raise ValueError("invalid literal for int() with base 10: 'x'")

    @test_app.get("/unexpected-error")
    def raise_unexpected_error() -> dict:
        raise RuntimeError("Something went wrong")

    @test_app.get("/limited")
    def limited(limit: int = Query(default=20, ge=1, le=100)) -> dict:
        return {"limit": limit}

    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client."""
    return TestClient(app, raise_server_exceptions=False)


class TestValidationErrorHandler:
    """Tests for ValidationError exception handler."""

    def test_simple_validation_error_returns_422(self, client: TestClient) -> None:
        """PagingValidationError returns 422 with structured error."""
        response = client.get("/paging-error")

        assert response.status_code == 422
        assert response.json() == {
            "detail": "limit must be <= 100",
            "code": "VALIDATION_ERROR",
        }

    def test_validation_error_with_field_errors_returns_422(self, client: TestClient) -> None:
        """Field errors are returned in order under 'errors'."""
        response = client.get("/filter-error-with-fields")

        assert response.status_code == 422
        data = response.json()

        assert data["detail"] == "Validation failed"
        assert data["code"] == "VALIDATION_ERROR"
        assert [error["field"] for error in data["errors"]] == ["priceMin", "rooms"]
        assert data["errors"][1]["code"] == "ROOMS_INVALID"


class TestNotFoundErrorHandler:
    def test_not_found_error_returns_404(self, client: TestClient) -> None:
        """NotFoundError returns 404 with structured error."""
        response = client.get("/not-found-error")

        assert response.status_code == 404
        assert response.json() == {
            "detail": "Apartment with identifier 'apt-404' not found",
            "code": "NOT_FOUND",
        }


class TestUnmappedDomainError:
    def test_unmapped_code_returns_400(self, client: TestClient) -> None:
        """Domain errors without a dedicated status fall back to 400."""
        response = client.get("/unmapped-domain-error")

        assert response.status_code == 400
        assert response.json() == {"detail": "Upstream unavailable", "code": "NETWORK_ERROR"}


class TestInternalErrorHandler:
    def test_internal_error_returns_500(self, client: TestClient) -> None:
        """InternalError returns 500 with its code."""
        response = client.get("/internal-error")

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"


class TestValueErrorHandler:
    def test_value_error_returns_422(self, client: TestClient) -> None:
        """ValueError returns 422 with INVALID_VALUE."""
        response = client.get("/value-error")

        assert response.status_code == 422
        assert response.json() == {
            "detail": "invalid literal for int() with base 10: 'x'",
            "code": "INVALID_VALUE",
        }


class TestUnexpectedErrorHandler:
    def test_unexpected_error_returns_500(self, client: TestClient) -> None:
        """Unexpected errors return 500 with generic message."""
        response = client.get("/unexpected-error")

        assert response.status_code == 500


class TestRequestValidationErrors:
    """Tests for FastAPI request validation error handling."""

    def test_query_constraint_violation_returns_422(self, client: TestClient) -> None:
        response = client.get("/limited", params={"limit": 500})

        assert response.status_code == 422
        data = response.json()
        assert data["detail"] == "Invalid request parameters"
        assert data["code"] == "VALIDATION_ERROR"
        assert data["errors"][0]["field"] == "limit"
        assert data["errors"][0]["code"] == "less_than_equal"

    def test_all_client_errors_have_detail_and_code(self, client: TestClient) -> None:
        """All client error responses have string 'detail' and 'code' fields."""
        for endpoint in (
            "/paging-error",
            "/filter-error-with-fields",
            "/not-found-error",
            "/value-error",
            "/limited?limit=0",
        ):
            data = client.get(endpoint).json()

            assert isinstance(data["detail"], str), endpoint
            assert isinstance(data["code"], str), endpoint

    def test_error_responses_are_never_cached(self, client: TestClient) -> None:
        """Errors opt out of the caching that listing responses allow."""
        for endpoint in (
            "/filter-error-with-fields",
            "/not-found-error",
            "/internal-error",
            "/value-error",
            "/unexpected-error",
            "/limited?limit=0",
        ):
            assert client.get(endpoint).headers["cache-control"] == "no-store", endpoint
