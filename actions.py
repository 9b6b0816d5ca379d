# actions.py
import datetime as dt
import logging
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from cache import INVOICES_PATH, ViewCache
from errors import PersistenceError
from models import FormState, Invoice
from utils import dollars_to_cents
from validation import InvoiceInput, validate_invoice_input

logger = logging.getLogger(__name__)


class ActionResult(BaseModel):
  """Outcome of an invoice form action.

  ``state`` carries field errors back to the form, ``error`` an opaque
  storage failure. On success ``redirect`` names the view to navigate to
  (None for delete) and ``revalidated`` the cached views dropped.
  """

  ok: bool
  op: str
  state: Optional[FormState] = None
  error: Optional[PersistenceError] = None
  redirect: Optional[str] = None
  revalidated: List[str] = Field(default_factory=list)
  rows_affected: int = 0


def _today() -> dt.date:
  return dt.datetime.now(dt.timezone.utc).date()


def _failed(session: Session, op: str, message: str) -> ActionResult:
  session.rollback()
  return ActionResult(ok=False, op=op, error=PersistenceError(op=op, message=message))


def create_invoice(
  session: Session,
  data: InvoiceInput,
  cache: ViewCache,
  today: Optional[dt.date] = None,
) -> ActionResult:
  invoice = Invoice(
    customer_id=data.customer_id,
    amount=dollars_to_cents(data.amount),
    status=data.status,
    date=today or _today(),
  )
  try:
    session.add(invoice)
    session.commit()
  except SQLAlchemyError:
    logger.exception("Database error inserting invoice for customer %s", data.customer_id)
    return _failed(session, "create_invoice", "Database Error: Failed to Create Invoice.")

  logger.info("Created invoice %s (%d cents, %s)", invoice.id, invoice.amount, invoice.status)
  cache.revalidate_path(INVOICES_PATH)
  return ActionResult(
    ok=True,
    op="create_invoice",
    redirect=INVOICES_PATH,
    revalidated=[INVOICES_PATH],
    rows_affected=1,
  )


def update_invoice(session: Session, invoice_id: str, data: InvoiceInput, cache: ViewCache) -> ActionResult:
  stmt = (
    update(Invoice)
    .where(Invoice.id == invoice_id)
    .values(
      customer_id=data.customer_id,
      amount=dollars_to_cents(data.amount),
      status=data.status,
    )
  )
  try:
    result = session.exec(stmt)
    session.commit()
  except SQLAlchemyError:
    logger.exception("Database error updating invoice %s", invoice_id)
    return _failed(session, "update_invoice", "Database Error: Failed to Update Invoice.")

  cache.revalidate_path(INVOICES_PATH)
  return ActionResult(
    ok=True,
    op="update_invoice",
    redirect=INVOICES_PATH,
    revalidated=[INVOICES_PATH],
    rows_affected=result.rowcount,
  )


def delete_invoice(session: Session, invoice_id: str, cache: ViewCache) -> ActionResult:
  # a missing id deletes nothing and still succeeds
  try:
    result = session.exec(delete(Invoice).where(Invoice.id == invoice_id))
    session.commit()
  except SQLAlchemyError:
    logger.exception("Database error deleting invoice %s", invoice_id)
    return _failed(session, "delete_invoice", "Database Error: Failed to Delete Invoice.")

  cache.revalidate_path(INVOICES_PATH)
  return ActionResult(
    ok=True,
    op="delete_invoice",
    revalidated=[INVOICES_PATH],
    rows_affected=result.rowcount,
  )


def submit_create_invoice(
  session: Session,
  cache: ViewCache,
  form: Mapping[str, Any],
) -> ActionResult:
  parsed = validate_invoice_input(form)
  if not parsed.success:
    return ActionResult(
      ok=False,
      op="create_invoice",
      state=FormState(errors=parsed.field_errors, message="Missing Fields. Failed to Create Invoice."),
    )
  return create_invoice(session, parsed.data, cache)


def submit_update_invoice(
  session: Session,
  cache: ViewCache,
  invoice_id: str,
  form: Mapping[str, Any],
) -> ActionResult:
  parsed = validate_invoice_input(form)
  if not parsed.success:
    return ActionResult(
      ok=False,
      op="update_invoice",
      state=FormState(errors=parsed.field_errors, message="Missing Fields. Failed to Update Invoice."),
    )
  return update_invoice(session, invoice_id, parsed.data, cache)
