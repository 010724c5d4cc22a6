"""FastAPI application factory for SafeTour."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from safetour.common.config import get_settings
from safetour.common.exceptions import ChainError, SafeTourError, StoreError
from safetour.common.logging import setup_logging
from safetour.common.schemas import ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, code: str, detail: str = "", **extra) -> JSONResponse:
    body = ErrorResponse(error=error, code=code, detail=detail).model_dump()
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(SafeTourError)
    async def safetour_error(request: Request, exc: SafeTourError):
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        extra = {}
        detail = ""
        if isinstance(exc, ChainError):
            detail = exc.reason
            extra["requestId"] = exc.request_id
        elif isinstance(exc, StoreError) and exc.request_id:
            extra["requestId"] = exc.request_id
            extra["chainTxRef"] = exc.chain_tx_ref
        return _error(exc.status_code, exc.message, exc.code, detail, **extra)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return _error(400, "Invalid request", "VALIDATION_ERROR", problems)

    @app.exception_handler(SQLAlchemyError)
    async def store_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Store failure on %s %s", request.method, request.url.path)
        return _error(500, "Server error", "STORE_ERROR")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        from safetour.deps import get_db
        db = get_db()
        await db.init()
        await db.create_all()
        yield
        # Shutdown
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=settings.api_version)

    # Mount routers
    from safetour.identity.router import router as identity_router
    from safetour.alerts.router import router as alerts_router
    from safetour.issuance.router import router as issuance_router
    from safetour.audit.router import router as audit_router

    prefix = settings.api_prefix
    app.include_router(identity_router, prefix=prefix, tags=["auth"])
    app.include_router(alerts_router, prefix=prefix, tags=["alerts"])
    app.include_router(issuance_router, prefix=prefix, tags=["issuance"])
    app.include_router(audit_router, prefix=prefix, tags=["audit"])

    return app
