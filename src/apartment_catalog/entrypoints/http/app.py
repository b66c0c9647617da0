from fastapi import FastAPI

from apartment_catalog.entrypoints.http.exception_handlers import register_exception_handlers
from apartment_catalog.entrypoints.http.routes.apartments import router as apartments_router
from apartment_catalog.entrypoints.http.routes.health import router as health_router


def build_app() -> FastAPI:
    app = FastAPI(
        title="Apartment Catalog API",
        description="""
        Apartment listing API backing the catalog page.

        ## Features
        - Paginated apartment listing
        - Filtering by price, area, rooms and floor
        - Filter bounds (metadata) returned with every page
        - Apartment details by ID

        ## Caching
        Listing responses carry Cache-Control and ETag headers.

        ## Error Handling
        All errors return structured JSON responses with error codes.
        See the error response schemas in the API documentation.
        """,
        version="0.1.0",
        docs_url="/docs",  # Swagger UI
        redoc_url="/redoc",  # ReDoc alternative
        openapi_url="/openapi.json",  # OpenAPI schema
    )

    # Register global exception handlers
    register_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(apartments_router, prefix="/api")

    return app


app = build_app()
