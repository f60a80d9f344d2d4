from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from app.api.main import api_router
from app.core.config import settings
from app.exceptions.handlers import register_exception_handlers
from app.logging_ import setup_logger


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logger("api")
    logger.info(f"{settings.PROJECT_NAME} started")
    yield
    logger.info(f"{settings.PROJECT_NAME} stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
