# db.py
from typing import Any, Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

import models  # noqa: F401  registers the tables on SQLModel.metadata


def create_db_engine(database_url: str) -> Engine:
  if database_url.startswith("sqlite"):
    engine = create_engine(
      database_url,
      echo=False,
      connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
      cursor = dbapi_conn.cursor()
      cursor.execute("PRAGMA foreign_keys=ON")
      cursor.close()

    return engine

  return create_engine(database_url, echo=False, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
  SQLModel.metadata.create_all(engine)


def get_session(request: Request) -> Iterator[Session]:
  with Session(request.app.state.engine) as session:
    yield session
