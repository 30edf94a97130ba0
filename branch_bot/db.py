"""
Database connection management.

Engines are created explicitly by entry points (scripts, the hosting web
layer) so importing this module never touches a database.

Environment variables:
    - DATABASE_URL: SQLAlchemy connection URL (default: local SQLite file)
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from .config import DATABASE_URL
from .models import Base


def create_db_engine(url: str | None = None, create_tables: bool = True) -> Engine:
    """
    Create an engine for the given URL (defaults to DATABASE_URL).

    Args:
        url: SQLAlchemy URL
        create_tables: Create branch_menus / recommendation_sessions if missing
    """
    url = url or DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(
        url,
        pool_pre_ping=True,
        echo=False,
        connect_args=connect_args,
    )
    if create_tables:
        Base.metadata.create_all(bind=engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def get_db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Yield a Session and close it afterwards."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
