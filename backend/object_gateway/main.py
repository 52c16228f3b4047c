import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from object_gateway.api.errors import request_validation_handler
from object_gateway.api.routers import health as health_router
from object_gateway.api.routers import s3 as s3_router
from object_gateway.core.config import get_settings
from object_gateway.core.logging import configure_logging
from object_gateway.services.storage import StorageServices

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    if getattr(app.state, "storage", None) is None:
        app.state.storage = StorageServices.from_settings(settings)
    logger.info("Serving bucket %r", settings.s3_bucket)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        debug=settings.debug,
        title="Object Gateway API",
        lifespan=lifespan,
    )
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health_router.router)
    app.include_router(s3_router.router)

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "object_gateway.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
