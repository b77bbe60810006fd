from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./album_chain.db"
    # None means the bundled reference data in core/data
    catalog_path: Optional[str] = None
    numbers_path: Optional[str] = None
    similarity_threshold: float = 0.80
    disallow_same_player_twice: bool = True
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite needs check_same_thread=False: FastAPI runs sync endpoints in a thread pool
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency: provides a database session

    yield guarantees the session is closed once the request is finished
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator: makes a block of database work atomic

    Usage:
        @transactional
        def some_business_logic(db: Session, ...):
            # every DB operation runs inside one transaction
            channel = Channel(...)
            db.add(channel)
            # no manual commit, the decorator handles it

    When the function raises:
        - rollback happens automatically
        - the exception is re-raised for the caller to handle

    Notes:
        - the first argument must be db: Session
        - never commit inside the function (the decorator does it)
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        # find the db session (positional or keyword)
        db = None
        if args and isinstance(args[0], Session):
            db = args[0]
        elif 'db' in kwargs:
            db = kwargs['db']

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
