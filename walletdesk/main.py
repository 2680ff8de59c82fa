import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from walletdesk import __version__
from walletdesk.api import create_api_router
from walletdesk.core.config import get_settings
from walletdesk.core.logging_setup import configure_logging
from walletdesk.infrastructure.database import dispose_engine, get_engine, init_db
from walletdesk.interfaces.http.errors import register_exception_handlers

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("%s %s started (%s)", settings.project_name, __version__, settings.environment)
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.project_name,
        description="Wallet back office: transfers, top-ups and transaction settlement",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health")
    async def health_check():
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
            database_status = "healthy"
        except SQLAlchemyError as exc:
            logger.warning("Health check database probe failed: %s", exc)
            database_status = "unhealthy"

        return {
            "status": "healthy" if database_status == "healthy" else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "services": {"database": database_status},
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "walletdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.server.reload,
        log_level=settings.logging.level.lower(),
    )
