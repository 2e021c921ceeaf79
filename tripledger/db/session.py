"""
Engine and session factory for the ledger database.
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from tripledger.core.config import settings
from tripledger.db.base import Base

logger = logging.getLogger(__name__)

# SQLite connections are shared across the threads FastAPI runs sync code on.
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_recycle=3600
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Request-scoped session; every service commits or rolls back its own work."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create every ledger table that does not exist yet."""
    import tripledger.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info(f"Ledger tables ready on {engine.url.render_as_string(hide_password=True)}")
