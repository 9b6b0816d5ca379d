"""Shared fixtures: a file-backed SQLite database per test, seeded customers,
a fresh view cache and an app client."""

import datetime as dt
from pathlib import Path
from typing import Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session

from cache import ViewCache
from config import Settings
from db import create_db_engine, init_db
from main import create_app
from models import Customer, Invoice

CUSTOMERS = [
  {"id": "c1", "name": "Delba de Oliveira", "email": "delba@oliveira.com", "image_url": "/customers/delba.png"},
  {"id": "c2", "name": "Lee Robinson", "email": "lee@robinson.com", "image_url": "/customers/lee.png"},
  {"id": "c3", "name": "Hector Simpson", "email": "hector@simpson.com", "image_url": "/customers/hector.png"},
]


def make_invoice(customer_id: str, amount: int, status: str, date: dt.date, invoice_id: Optional[str] = None) -> Invoice:
  fields = {"customer_id": customer_id, "amount": amount, "status": status, "date": date}
  if invoice_id:
    fields["id"] = invoice_id
  return Invoice(**fields)


def add_all(engine: Engine, rows: List) -> None:
  with Session(engine) as s:
    s.add_all(rows)
    s.commit()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
  engine = create_db_engine(f"sqlite:///{tmp_path / 'invoices.db'}")
  init_db(engine)
  add_all(engine, [Customer(**c) for c in CUSTOMERS])
  try:
    yield engine
  finally:
    engine.dispose()


@pytest.fixture
def session(db_engine: Engine) -> Iterator[Session]:
  with Session(db_engine) as s:
    yield s


@pytest.fixture
def cache() -> ViewCache:
  return ViewCache()


@pytest.fixture
def client(tmp_path: Path) -> Iterator[TestClient]:
  settings = Settings(database_url=f"sqlite:///{tmp_path / 'app.db'}", log_level="WARNING")
  app = create_app(settings)
  with TestClient(app) as test_client:
    add_all(app.state.engine, [Customer(**c) for c in CUSTOMERS])
    yield test_client
