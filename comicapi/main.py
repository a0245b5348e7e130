import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI  # noqa: E402
from mangum import Mangum  # noqa: E402
from starlette.middleware.cors import CORSMiddleware  # noqa: E402

from comicapi import containers  # noqa: E402
from comicapi.config import settings  # noqa: E402
from comicapi.core.exception_handlers import register_exception_handlers  # noqa: E402
from comicapi.core.logging_middleware import LoggingMiddleware  # noqa: E402
from comicapi.logging_config import setup_logging  # noqa: E402
from comicapi.routers import (  # noqa: E402
    auth_router,
    chapter_router,
    currency_router,
    health_router,
    payment_router,
    withdraw_router,
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        docs_url=None if settings.is_production else "/docs",
    )
    app.container = containers.Container()  # type: ignore[attr-defined]

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    for module in (
        health_router,
        auth_router,
        chapter_router,
        payment_router,
        currency_router,
        withdraw_router,
    ):
        app.include_router(module.router, prefix=settings.API_PREFIX)

    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    return app


app = create_app()

handler = Mangum(app)
