"""
SQLite engine and session management for the relational user backend.
"""
from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

DATABASE_FILENAME = "app.db"


def create_sqlite_engine(data_dir: Path) -> Engine:
    """
    Create an engine for ``<data_dir>/app.db``, creating the directory if needed.
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite:///{data_dir / DATABASE_FILENAME}",
        connect_args={"check_same_thread": False},
        pool_pre_ping=True,
        echo=False,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """
    Register models and create the users table if it does not exist yet.
    """
    from app.models import Base

    Base.metadata.create_all(bind=engine)


def check_database_connection(engine: Engine) -> bool:
    """
    Return True when the database connection is healthy.
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
