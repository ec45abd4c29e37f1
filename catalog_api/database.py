# catalog_api/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from .config import settings


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str) -> Engine:
    """
    Creates an engine for the given URL.

    SQLite connections are shared with FastAPI's worker threads, so the
    same-thread check is switched off for them.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


# The engine is the main entry point to the database.
engine = build_engine(settings.get_database_url())

# Create a SessionLocal class for database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(bind: Engine):
    # Imported for its side effect of registering the table on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind)
