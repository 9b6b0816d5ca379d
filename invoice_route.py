# invoice_route.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from sqlmodel import Session

from actions import ActionResult, delete_invoice, submit_create_invoice, submit_update_invoice
from cache import INVOICES_PATH, ViewCache
from data import (
  fetch_card_data,
  fetch_customers,
  fetch_filtered_customers,
  fetch_filtered_invoices,
  fetch_invoice_by_id,
  fetch_invoices_pages,
  fetch_latest_invoices,
  fetch_revenue,
)
from db import get_session
from models import CardData, CustomerField, CustomerTableRow, InvoiceForm, InvoiceRow, LatestInvoice, Revenue

router = APIRouter(prefix="/api", tags=["invoices"])


def get_cache(request: Request) -> ViewCache:
  return request.app.state.cache


def _finish(result: ActionResult) -> ActionResult:
  if result.state is not None:
    raise HTTPException(status_code=422, detail=result.state.model_dump())
  if result.error is not None:
    raise HTTPException(status_code=500, detail=result.error.message)
  return result


@router.get("/invoices", response_model=List[InvoiceRow])
def list_invoices(
  query: str = "",
  page: int = 1,
  session: Session = Depends(get_session),
  cache: ViewCache = Depends(get_cache),
):
  return cache.get_or_load(
    INVOICES_PATH,
    ("rows", query, page),
    lambda: fetch_filtered_invoices(session, query, page),
  )


@router.get("/invoices/pages")
def invoice_pages(
  query: str = "",
  session: Session = Depends(get_session),
  cache: ViewCache = Depends(get_cache),
):
  total_pages = cache.get_or_load(
    INVOICES_PATH,
    ("pages", query),
    lambda: fetch_invoices_pages(session, query),
  )
  return {"query": query, "total_pages": total_pages}


@router.get("/invoices/latest", response_model=List[LatestInvoice])
def latest_invoices(session: Session = Depends(get_session)):
  return fetch_latest_invoices(session)


@router.get("/invoices/{invoice_id}", response_model=InvoiceForm)
def get_invoice(invoice_id: str, session: Session = Depends(get_session)):
  invoice = fetch_invoice_by_id(session, invoice_id)
  if not invoice:
    raise HTTPException(status_code=404, detail="Invoice not found")
  return invoice


@router.post("/invoices", response_model=ActionResult)
def create_invoice(
  customerId: Optional[str] = Form(None),
  amount: Optional[str] = Form(None),
  status: Optional[str] = Form(None),
  session: Session = Depends(get_session),
  cache: ViewCache = Depends(get_cache),
):
  form = {"customerId": customerId, "amount": amount, "status": status}
  return _finish(submit_create_invoice(session, cache, form))


@router.put("/invoices/{invoice_id}", response_model=ActionResult)
def update_invoice(
  invoice_id: str,
  customerId: Optional[str] = Form(None),
  amount: Optional[str] = Form(None),
  status: Optional[str] = Form(None),
  session: Session = Depends(get_session),
  cache: ViewCache = Depends(get_cache),
):
  form = {"customerId": customerId, "amount": amount, "status": status}
  return _finish(submit_update_invoice(session, cache, invoice_id, form))


@router.delete("/invoices/{invoice_id}", response_model=ActionResult)
def remove_invoice(
  invoice_id: str,
  session: Session = Depends(get_session),
  cache: ViewCache = Depends(get_cache),
):
  return _finish(delete_invoice(session, invoice_id, cache))


@router.get("/dashboard/cards", response_model=CardData)
def card_data(session: Session = Depends(get_session)):
  return fetch_card_data(session)


@router.get("/revenue", response_model=List[Revenue])
def revenue(session: Session = Depends(get_session)):
  return fetch_revenue(session)


@router.get("/customers", response_model=List[CustomerField])
def list_customers(session: Session = Depends(get_session)):
  return fetch_customers(session)


@router.get("/customers/table", response_model=List[CustomerTableRow])
def customers_table(query: str = "", session: Session = Depends(get_session)):
  return fetch_filtered_customers(session, query)
