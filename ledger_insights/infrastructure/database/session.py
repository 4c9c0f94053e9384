"""Database session management with connection pooling"""

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ledger_insights.config import settings


def create_session_factory(database_url: str | None = None) -> sessionmaker:
    """Session factory bound to a pooled engine"""
    url = database_url or settings.database_url
    options = {"pool_pre_ping": True}  # Verify connections before using
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
        options.update(pool_size=10, max_overflow=10, pool_recycle=3600)

    engine = create_engine(url, **options)
    return sessionmaker(autoflush=False, bind=engine)


def get_db(factory: sessionmaker) -> Iterator[Session]:
    """Yield a session and always close it"""
    db = factory()
    try:
        yield db
    finally:
        db.close()
