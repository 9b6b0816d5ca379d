# data.py
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import String, case, cast, func, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, col, select

from errors import DataFetchError
from models import (
  CardData,
  Customer,
  CustomerField,
  CustomerTableRow,
  Invoice,
  InvoiceForm,
  InvoiceRow,
  LatestInvoice,
  Revenue,
)
from utils import cents_to_dollars, format_currency

logger = logging.getLogger(__name__)

ITEMS_PER_PAGE = 6
LATEST_INVOICES = 5


@contextmanager
def _fetching(message: str) -> Iterator[None]:
  try:
    yield
  except SQLAlchemyError as exc:
    logger.exception("Database Error: %s", message)
    raise DataFetchError(message) from exc


def _status_total(status: str) -> ColumnElement:
  return func.coalesce(func.sum(case((col(Invoice.status) == status, Invoice.amount), else_=0)), 0)


def invoice_search_filter(query: Optional[str]) -> ColumnElement:
  """Predicate shared by the invoice listing and its page count.

  Case-insensitive literal substring match on customer name and email and
  on the invoice amount, date and status rendered as text.
  """
  term = query or ""
  return or_(
    col(Customer.name).icontains(term, autoescape=True),
    col(Customer.email).icontains(term, autoescape=True),
    cast(Invoice.amount, String).icontains(term, autoescape=True),
    cast(Invoice.date, String).icontains(term, autoescape=True),
    col(Invoice.status).icontains(term, autoescape=True),
  )


def customer_search_filter(query: Optional[str]) -> ColumnElement:
  term = query or ""
  return or_(
    col(Customer.name).icontains(term, autoescape=True),
    col(Customer.email).icontains(term, autoescape=True),
  )


def fetch_revenue(session: Session) -> List[Revenue]:
  with _fetching("Failed to fetch revenue data."):
    return list(session.exec(select(Revenue)).all())


def fetch_latest_invoices(session: Session) -> List[LatestInvoice]:
  stmt = (
    select(Invoice.amount, Customer.name, Customer.image_url, Customer.email, Invoice.id)
    .join(Customer, col(Invoice.customer_id) == col(Customer.id))
    .order_by(col(Invoice.date).desc(), col(Invoice.id).desc())
    .limit(LATEST_INVOICES)
  )
  with _fetching("Failed to fetch the latest invoices."):
    rows = session.exec(stmt).all()

  return [
    LatestInvoice(
      id=row.id,
      name=row.name,
      email=row.email,
      image_url=row.image_url,
      amount=format_currency(row.amount),
    )
    for row in rows
  ]


def _count_rows(engine: Engine, model) -> int:
  with Session(engine) as session:
    return session.exec(select(func.count()).select_from(model)).one()


def _status_totals(engine: Engine) -> Tuple[int, int]:
  with Session(engine) as session:
    paid, pending = session.exec(select(_status_total("paid"), _status_total("pending"))).one()
  return int(paid), int(pending)


def fetch_card_data(session: Session) -> CardData:
  """Dashboard summary cards.

  The three reads are independent, so each runs on its own session and
  they are awaited together. Statuses other than paid/pending count
  towards neither total.
  """
  engine = session.get_bind()
  with _fetching("Failed to fetch card data."):
    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="card-data") as pool:
      invoice_count = pool.submit(_count_rows, engine, Invoice)
      customer_count = pool.submit(_count_rows, engine, Customer)
      totals = pool.submit(_status_totals, engine)
      paid, pending = totals.result()
      number_of_invoices = invoice_count.result()
      number_of_customers = customer_count.result()

  return CardData(
    number_of_invoices=number_of_invoices,
    number_of_customers=number_of_customers,
    total_paid_invoices=format_currency(paid),
    total_pending_invoices=format_currency(pending),
  )


def fetch_filtered_invoices(session: Session, query: Optional[str], current_page: int) -> List[InvoiceRow]:
  offset = (max(current_page, 1) - 1) * ITEMS_PER_PAGE
  stmt = (
    select(
      Invoice.id,
      Invoice.amount,
      Invoice.date,
      Invoice.status,
      Customer.name,
      Customer.email,
      Customer.image_url,
    )
    .join(Customer, col(Invoice.customer_id) == col(Customer.id))
    .where(invoice_search_filter(query))
    # id breaks date ties so pages don't overlap
    .order_by(col(Invoice.date).desc(), col(Invoice.id).desc())
    .limit(ITEMS_PER_PAGE)
    .offset(offset)
  )
  with _fetching("Failed to fetch invoices."):
    rows = session.exec(stmt).all()
  return [InvoiceRow.model_validate(dict(row._mapping)) for row in rows]


def fetch_invoices_pages(session: Session, query: Optional[str]) -> int:
  stmt = (
    select(func.count())
    .select_from(Invoice)
    .join(Customer, col(Invoice.customer_id) == col(Customer.id))
    .where(invoice_search_filter(query))
  )
  with _fetching("Failed to fetch total number of invoices."):
    total = session.exec(stmt).one()
  return math.ceil(total / ITEMS_PER_PAGE)


def fetch_invoice_by_id(session: Session, invoice_id: str) -> Optional[InvoiceForm]:
  with _fetching("Failed to fetch invoice."):
    invoice = session.get(Invoice, invoice_id)
  if invoice is None:
    return None
  return InvoiceForm(
    id=invoice.id,
    customer_id=invoice.customer_id,
    amount=cents_to_dollars(invoice.amount),
    status=invoice.status,
  )


def fetch_customers(session: Session) -> List[CustomerField]:
  stmt = select(Customer.id, Customer.name).order_by(col(Customer.name).asc())
  with _fetching("Failed to fetch all customers."):
    rows = session.exec(stmt).all()
  return [CustomerField(id=row.id, name=row.name) for row in rows]


def fetch_filtered_customers(session: Session, query: Optional[str]) -> List[CustomerTableRow]:
  stmt = (
    select(
      Customer.id,
      Customer.name,
      Customer.email,
      Customer.image_url,
      func.count(Invoice.id).label("total_invoices"),
      _status_total("pending").label("total_pending"),
      _status_total("paid").label("total_paid"),
    )
    .select_from(Customer)
    .outerjoin(Invoice, col(Customer.id) == col(Invoice.customer_id))
    .where(customer_search_filter(query))
    .group_by(Customer.id, Customer.name, Customer.email, Customer.image_url)
    .order_by(col(Customer.name).asc())
  )
  with _fetching("Failed to fetch customer table."):
    rows = session.exec(stmt).all()

  return [
    CustomerTableRow(
      id=row.id,
      name=row.name,
      email=row.email,
      image_url=row.image_url,
      total_invoices=row.total_invoices,
      total_pending=format_currency(row.total_pending),
      total_paid=format_currency(row.total_paid),
    )
    for row in rows
  ]
