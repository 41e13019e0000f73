"""
Job board API entrypoint.

``app`` is built by ``create_app``; run locally with ``python -m api.main``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import health
from api.routes.v1 import applications, catalogs, jobs, search
from core.config import Settings, settings
from core.middleware import (
    AuthenticationMiddleware,
    ErrorHandlingMiddleware,
    StructuredLoggingMiddleware,
    setup_error_handlers,
    setup_logging,
)
from database.engine import close_db, init_db

logger = logging.getLogger(__name__)

V1_ROUTERS = (jobs.router, applications.router, search.router, catalogs.router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup and release connections on shutdown."""
    logger.info(f"{app.title} starting ({settings.app_env})")
    await init_db()
    try:
        yield
    finally:
        logger.info(f"{app.title} stopping")
        await close_db()


def create_app(config: Settings = settings) -> FastAPI:
    setup_logging(log_level=config.log_level, json_logs=config.json_logs)

    docs = config.debug
    application = FastAPI(
        title=config.app_name,
        description="Job board: listings, applications and search",
        version="0.1.0",
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        lifespan=lifespan,
    )
    setup_error_handlers(application)

    # Added innermost first; requests pass
    # ErrorHandling -> StructuredLogging -> CORS -> Authentication -> routes.
    # CORS answers preflight requests before a token is required.
    application.add_middleware(
        AuthenticationMiddleware,
        jwt_secret=config.jwt_secret_key,
        jwt_algorithm=config.jwt_algorithm,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(
        StructuredLoggingMiddleware,
        log_request_body=config.log_request_body,
        log_response_body=config.log_response_body,
        max_body_size=config.log_max_body_size,
    )
    application.add_middleware(ErrorHandlingMiddleware, debug=config.debug)

    application.include_router(health.router)
    for router in V1_ROUTERS:
        application.include_router(router, prefix=config.api_v1_prefix)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
