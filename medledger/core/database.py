from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator, Iterator
import redis
from .config import settings

_database_url = settings.get_database_url

# SQLite (tests, local runs) needs cross-thread access; server databases get a pool
if _database_url.startswith("sqlite"):
    engine = create_engine(
        _database_url,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        _database_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Redis setup - mock for testing
if settings.TESTING:
    # Records published notifications in memory so tests can inspect them
    class RedisMock:
        def __init__(self):
            self.published = []

        def publish(self, channel, message):
            self.published.append((channel, message))
            return 0

        def ping(self):
            return True

    redis_client = RedisMock()
else:
    # Real Redis client for production
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Redis dependency
def get_redis():
    """Get Redis client."""
    return redis_client

@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a block as one transaction: commit on success, roll back on any error."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise

# Database initialization
def init_db():
    """Initialize database tables and id sequences."""
    from .. import models  # noqa: F401  (registers every table on Base.metadata)
    from ..services.sequences import seed_sequences

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_sequences(db)
    finally:
        db.close()
