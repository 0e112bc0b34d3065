"""Database configuration for the Family Navigator records API."""
from typing import Generator
from sqlmodel import create_engine, Session
import os
from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.engine import Engine

load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./family_navigator.db")

if DATABASE_URL.startswith("postgresql"):
    print("[DB CONFIG] Using PostgreSQL database")
else:
    print(f"[DB CONFIG] Using SQLite database: {DATABASE_URL}")


def create_db_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine, turning on foreign key enforcement for SQLite."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, **kwargs)

    connect_args = kwargs.pop("connect_args", {})
    connect_args.setdefault("check_same_thread", False)
    sqlite_engine = create_engine(database_url, echo=False, connect_args=connect_args, **kwargs)

    @event.listens_for(sqlite_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = create_db_engine(DATABASE_URL)


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session
