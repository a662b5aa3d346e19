import logging

from fastapi import APIRouter

from app.core.database import SessionLocal, engine
from app.core.errors import AppError
from app.models import Base
from app.services.seed import DEMO_COUNTERS, seed_demo

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/initialize-database")
def initialize_database():
    """
    Initialize database with schema and demo counters.
    WARNING: This will drop all existing tables and recreate them!
    """
    try:
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        with SessionLocal() as db:
            seed_demo(db)
    except Exception as e:
        logger.exception("Database initialization failed")
        raise AppError(f"Error initializing database: {e}", status_code=500) from e

    return {
        "status": True,
        "message": "Database initialized successfully with demo counters",
        "data": {"counters": DEMO_COUNTERS},
    }
