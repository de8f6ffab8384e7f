# console_api/infrastructure/database/session.py

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from console_api.config.settings import settings


def build_engine(database_url: str, *, statement_timeout_ms: int, echo: bool = False) -> Engine:
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        # sqlite3 "timeout" is the busy wait on a locked database, in seconds
        connect_args = {"timeout": max(statement_timeout_ms / 1000, 1), "check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            return create_engine(url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(url, echo=echo, connect_args=connect_args)

    connect_args = {
        "connect_timeout": max(statement_timeout_ms // 1000, 1),
        "options": f"-c statement_timeout={statement_timeout_ms}",
    }
    return create_engine(url, echo=echo, pool_pre_ping=True, connect_args=connect_args)


_engine = build_engine(
    settings.database_url,
    statement_timeout_ms=settings.db_statement_timeout_ms,
    echo=settings.debug,
)

_SessionLocal = sessionmaker(
    bind=_engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def get_engine() -> Engine:
    return _engine


@contextmanager
def db_session() -> Iterator[Session]:
    session: Session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
