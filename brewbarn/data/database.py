from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from ..app.config import Config
from ..utils.logger import get_logger

logger = get_logger()

DATABASE_URL = Config.DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    # An in-memory database only lives as long as its single connection.
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


# Create the SQLAlchemy engine
engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create a base class for our models
Base = declarative_base()

def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def create_tables():
    """Create all tables in the database."""
    # Import all models here before calling create_all
    # This ensures they are registered with the Base metadata
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully.")

def drop_tables():
    """Drop all tables (used by tests to reset state)."""
    from . import models  # noqa: F401
    Base.metadata.drop_all(bind=engine)

if __name__ == "__main__":
    create_tables()
