"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.errors import register_exception_handlers
from src.api.routes import admin, health, invoices, product_requests
from src.infrastructure.database.connection import dispose_engine
from src.logging_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    logger.info("backoffice_starting")
    yield
    await dispose_engine()
    logger.info("backoffice_stopping")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace Back Office",
        description="Product request review and PayPal invoice issuance for the marketplace.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(product_requests.router)
    app.include_router(admin.router)
    app.include_router(invoices.router)

    return app


app = create_app()
