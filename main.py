"""
User API — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.routes import router as api_router
from auth.tokens import TokenService
from config.settings import Settings, get_settings
from database.session import build_engine, build_session_factory, init_models

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("aiosqlite", "asyncio", "httpcore", "httpx"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(settings.database_url, echo=settings.debug)
        await init_models(engine)
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        logger.info("Server running at %s", settings.public_url)
        logger.info("Swagger docs are available at %s/api-docs", settings.public_url)
        try:
            yield
        finally:
            await engine.dispose()
            logger.info("Database engine disposed")

    app = FastAPI(
        title="User API",
        version="2.0.0",
        description="API for user management with authentication",
        docs_url="/api-docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_service = TokenService(settings.jwt_secret, settings.jwt_expiry_seconds)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(api_router)

    return app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.debug)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
