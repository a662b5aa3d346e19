import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging_config import setup_logging
from app.core.publisher import close_publisher
from app.routes.health import router as health_router
from app.routes.init import router as init_router
from app.routes.queues import router as queues_router
from app.core.database import SessionLocal, init_db
from app.services.seed import seed_demo


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(title=settings.project_name, version=settings.api_version)

    origins = settings.cors_origins
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(init_router, prefix="/init", tags=["init"])
    app.include_router(queues_router, prefix="/queues", tags=["queues"])

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        close_publisher()

    return app


app = create_app()

# Only seed in development or when explicitly requested
if settings.env == "dev" or os.getenv("FORCE_SEED") == "true":
    try:
        init_db()
        with SessionLocal() as db:
            seed_demo(db)
    except Exception:
        logger.exception("Could not initialize demo database")
