# blog_api/db/session.py
import logging
from typing import Iterator

from sqlmodel import SQLModel, create_engine, Session

from ..core.config import settings
from . import models  # noqa: F401  registers tables on SQLModel.metadata

logger = logging.getLogger(__name__)


def build_engine(db_url: str, echo: bool = False):
    """Create an engine whose connection attempts give up after DB_CONNECT_TIMEOUT."""
    engine_kwargs = {}
    if db_url.startswith("sqlite"):
        # SQLite specific connect args
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False, "timeout": settings.DB_CONNECT_TIMEOUT}
        })
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "connect_args": {"connect_timeout": settings.DB_CONNECT_TIMEOUT},
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })
    return create_engine(db_url, echo=echo, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables(bind=None) -> None:
    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables ensured")


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
