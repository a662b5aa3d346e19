"""
Script to recreate the database and seed demo counters
"""
from app.core.database import SessionLocal, engine
from app.models import Base
from app.services.seed import DEMO_COUNTERS, seed_demo


def recreate_db():
    print("Recreating queue ticketing database...")

    print("Dropping existing tables...")
    Base.metadata.drop_all(bind=engine)

    print("Creating tables...")
    Base.metadata.create_all(bind=engine)

    print("Seeding demo counters...")
    db = SessionLocal()
    try:
        seed_demo(db)
    except Exception as e:
        print(f"Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

    print("Database recreated successfully!")
    print("Counters: " + ", ".join(DEMO_COUNTERS))


if __name__ == "__main__":
    recreate_db()
