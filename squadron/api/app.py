"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, and route registration.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from squadron import __version__
from squadron.api.dependencies import get_settings
from squadron.api.exceptions import LIFECYCLE_ERROR_STATUS, SquadronAPIError
from squadron.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from squadron.api.routes import register_routes
from squadron.db.errors import StoreError
from squadron.lifecycle.errors import LifecycleError
from squadron.observability.logging import get_logger, setup_logging
from squadron.provisioning.client import ProvisioningError

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a fully configured FastAPI app with:
    - Structured logging configured from settings
    - CORS middleware
    - Global exception handlers
    - All API routes registered

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    setup_logging(settings.observability.logging)

    app = FastAPI(
        title="Squadron API",
        description="Version lifecycle management for voice-agent squads",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    register_routes(app)

    logger.info(
        "app_created",
        debug=settings.debug,
        storage_backend=settings.storage.backend,
        provisioning_backend=settings.provisioning.backend,
    )

    return app


def _error_response(status_code: int, body: ErrorBody) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=body).model_dump(mode="json"),
    )


def _validation_details(errors: list) -> list[ErrorDetail]:
    return [
        ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
        for error in errors
    ]


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(SquadronAPIError)
    async def squadron_api_error_handler(
        request: Request, exc: SquadronAPIError
    ) -> JSONResponse:
        """Handle SquadronAPIError and its subclasses."""
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(
            exc.status_code, ErrorBody(code=exc.error_code, message=exc.message)
        )

    @app.exception_handler(LifecycleError)
    async def lifecycle_error_handler(
        request: Request, exc: LifecycleError
    ) -> JSONResponse:
        """Map lifecycle errors to HTTP statuses by error code."""
        status_code, code = LIFECYCLE_ERROR_STATUS.get(
            exc.code, (500, ErrorCode.INTERNAL_ERROR)
        )
        logger.warning(
            "lifecycle_error",
            error_code=exc.code.value,
            message=exc.message,
            account_id=exc.account_id,
            path=request.url.path,
        )
        return _error_response(
            status_code,
            ErrorBody(code=code, message=exc.message, account_id=exc.account_id),
        )

    @app.exception_handler(ProvisioningError)
    async def provisioning_error_handler(
        request: Request, exc: ProvisioningError
    ) -> JSONResponse:
        """Handle provisioning API failures outside a swap."""
        logger.warning(
            "provisioning_error",
            operation=exc.operation,
            status_code=exc.status_code,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(
            502,
            ErrorBody(code=ErrorCode.PROVISIONING_UNAVAILABLE, message=exc.message),
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        """Handle storage backend failures."""
        logger.error(
            "store_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(
            503,
            ErrorBody(code=ErrorCode.STORE_UNAVAILABLE, message="Storage backend unavailable"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle FastAPI request validation errors."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=_validation_details(exc.errors()),
            ),
        )

    @app.exception_handler(ValidationError)
    async def pydantic_validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        logger.warning(
            "pydantic_validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Data validation failed",
                details=_validation_details(exc.errors()),
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(
            500,
            ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred"),
        )

    logger.debug("exception_handlers_registered")


# Create the app instance for uvicorn
app = create_app()
