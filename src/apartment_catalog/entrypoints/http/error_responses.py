"""OpenAPI models of the error bodies written by ``exception_handlers``."""

from pydantic import BaseModel, ConfigDict


class ErrorDetail(BaseModel):
    field: str
    message: str
    code: str | None = None


class ErrorResponse(BaseModel):
    detail: str
    code: str | None = None
    errors: list[ErrorDetail] | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"detail": "Apartment with identifier 'apt-404' not found", "code": "NOT_FOUND"},
                {
                    "detail": "Validation failed",
                    "code": "VALIDATION_ERROR",
                    "errors": [
                        {
                            "field": "floors",
                            "message": "Minimum floor cannot be greater than maximum floor",
                            "code": "FLOOR_RANGE_INVALID",
                        },
                    ],
                },
            ]
        }
    )
