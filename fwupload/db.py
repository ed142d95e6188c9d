from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fwupload.config import Settings


class Base(DeclarativeBase):
    pass


def get_engine(settings: Settings) -> Engine:
    # SQLite needs check_same_thread for sync sessions
    connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
    return create_engine(settings.database_url, connect_args=connect_args, future=True)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def init_db(engine: Engine) -> None:
    from fwupload import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
