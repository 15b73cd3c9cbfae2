from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from gear_console import __version__
from gear_console.backend.routes.catalog_route import router as catalog_router
from gear_console.backend.routes.inventory_route import router as inventory_router
from gear_console.backend.routes.operation_log_route import router as operation_log_router
from gear_console.backend.store import InventoryStore
from gear_console.exceptions import ApplicationError, DatabaseError
from gear_console.logging_config import get_child_logger, tracer

logger = get_child_logger("backend.app")


async def handle_database_error(request: Request, exc: DatabaseError):
    with tracer.start_as_current_span("handle_database_error") as span:
        span.set_attribute("error", True)
        span.set_attribute("error.type", "database_error")

        logger.error(
            "Database error",
            extra={"error": str(exc), "path": request.url.path}
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )


async def handle_application_error(request: Request, exc: ApplicationError):
    logger.warning(
        "Application error",
        extra={"error_type": type(exc).__name__, "path": request.url.path}
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


def create_app(store: Optional[InventoryStore] = None) -> FastAPI:
    """
    Build the inventory API. Each app owns its store; pass one in to
    share or pre-populate it.
    """
    app = FastAPI(
        title="Inventory API",
        version=__version__,
        openapi_url="/api/openapi.json",
    )
    app.state.store = store or InventoryStore()

    @app.middleware("http")
    async def trace_requests(request: Request, call_next):
        with tracer.start_as_current_span("process_request") as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.url", str(request.url))

            logger.info(
                f"Processing {request.method} request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "query_params": dict(request.query_params),
                }
            )
            response = await call_next(request)
            span.set_attribute("http.status_code", response.status_code)
            return response

    app.add_exception_handler(DatabaseError, handle_database_error)
    app.add_exception_handler(ApplicationError, handle_application_error)

    app.include_router(inventory_router)
    app.include_router(operation_log_router)
    app.include_router(catalog_router)
    return app


app = create_app()
