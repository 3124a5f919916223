from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.database import engine
from src.core.redis import close_redis, redis_client
from src.schemas import ErrorResponse
from src.services.exceptions import SalesOrderError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Startup
    app.state.redis = redis_client
    yield
    # Shutdown
    await close_redis()
    await engine.dispose()


async def sales_order_error_handler(request: Request, exc: SalesOrderError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.detail}")
    body = ErrorResponse(detail=exc.detail, error_code=exc.error_code)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    body = ErrorResponse(detail="Internal server error", error_code="internal_error")
    return JSONResponse(status_code=500, content=body.model_dump())


def create_app() -> FastAPI:
    logging.basicConfig(level=settings.app_log_level)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_exception_handler(SalesOrderError, sales_order_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Register routes
    from src.api.v1.router import api_v1_router

    app.include_router(api_v1_router, prefix="/api/v1")

    # Mount SQLAdmin
    from src.admin import mount_admin

    mount_admin(app, engine)

    return app


app = create_app()
