# models.py
import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlmodel import SQLModel, Field

INVOICE_STATUSES = ("pending", "paid")


def _new_id() -> str:
  return str(uuid4())


class Customer(SQLModel, table=True):
  __tablename__ = "customers"

  id: str = Field(default_factory=_new_id, primary_key=True, index=True)
  name: str
  email: str
  image_url: str


class Invoice(SQLModel, table=True):
  __tablename__ = "invoices"

  id: str = Field(default_factory=_new_id, primary_key=True, index=True)
  customer_id: str = Field(foreign_key="customers.id", index=True)
  amount: int  # cents
  status: str  # pending|paid
  date: dt.date


class Revenue(SQLModel, table=True):
  __tablename__ = "revenue"

  month: str = Field(primary_key=True, max_length=4)
  revenue: int


class User(SQLModel, table=True):
  __tablename__ = "users"

  id: str = Field(default_factory=_new_id, primary_key=True)
  name: str
  email: str = Field(unique=True, index=True)
  password: str  # bcrypt hash, written by the seeding job


# read models

class InvoiceRow(SQLModel):
  id: str
  amount: int
  date: dt.date
  status: str
  name: str
  email: str
  image_url: str


class LatestInvoice(SQLModel):
  id: str
  amount: str
  name: str
  email: str
  image_url: str


class InvoiceForm(SQLModel):
  id: str
  customer_id: str
  amount: Decimal  # dollars
  status: str


class CustomerField(SQLModel):
  id: str
  name: str


class CustomerTableRow(SQLModel):
  id: str
  name: str
  email: str
  image_url: str
  total_invoices: int
  total_pending: str
  total_paid: str


class CardData(BaseModel):
  model_config = ConfigDict(populate_by_name=True, frozen=True)

  number_of_invoices: int = PydanticField(alias="numberOfInvoices")
  number_of_customers: int = PydanticField(alias="numberOfCustomers")
  total_paid_invoices: str = PydanticField(alias="totalPaidInvoices")
  total_pending_invoices: str = PydanticField(alias="totalPendingInvoices")


class FormState(BaseModel):
  errors: dict[str, list[str]] = PydanticField(default_factory=dict)
  message: Optional[str] = None
