from typing import Iterator

from sqlmodel import SQLModel, Session, create_engine

from app.config import settings


def _connect_args(dsn: str) -> dict:
    # SQLite connections are shared with FastAPI's threadpool
    if dsn.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_dsn,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_dsn),
)


def create_db_and_tables() -> None:
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine)


def session_dependency() -> Iterator[Session]:
    """FastAPI dependency: one session per request."""
    with get_session() as session:
        yield session
