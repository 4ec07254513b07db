import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from pastoral.api.router import api_router
from pastoral.core.config import settings
from pastoral.core.errors import CareError, CareValidationError
from pastoral.core.logging import setup_logging
from pastoral.db import build_engine, init_db
from pastoral.services.notices import NoticeBoard
from pastoral.services.realtime import SubscriptionHub
from pastoral.services.redis_pubsub import RedisChangeRelay
from pastoral.services.store import DocumentStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and, when enabled, join the cross-process change relay."""
    init_db(app.state.engine)
    relay: Optional[RedisChangeRelay] = None
    if settings.REALTIME_REDIS_ENABLED:
        relay = RedisChangeRelay(app.state.hub)
        await relay.connect()
        app.state.store.add_change_listener(relay.publish_change)
    app.state.relay = relay
    logger.info(f"{settings.PROJECT_NAME} started")
    yield
    if relay is not None:
        await relay.disconnect()
    app.state.hub.close_all()
    logger.info(f"{settings.PROJECT_NAME} shutting down")


def create_application(engine: Optional[Engine] = None) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)
    app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0", lifespan=lifespan)

    app.state.engine = engine or build_engine()
    app.state.hub = SubscriptionHub()
    app.state.store = DocumentStore(app.state.engine, app.state.hub)
    # One notice board per process, never replaced while running
    app.state.notices = NoticeBoard()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f} ms)"
        )
        return response

    @app.exception_handler(CareValidationError)
    async def care_validation_handler(request: Request, exc: CareValidationError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "notice": exc.notice},
        )

    @app.exception_handler(CareError)
    async def care_error_handler(request: Request, exc: CareError):
        logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    app.include_router(api_router, prefix=settings.API_STR)
    return app


app = create_application()
