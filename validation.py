# validation.py
from decimal import Decimal, DecimalException
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from models import INVOICE_STATUSES
from utils import cents_to_dollars, format_currency

CUSTOMER_MESSAGE = "Please select a customer."
AMOUNT_INVALID_MESSAGE = "Please enter a valid amount."
AMOUNT_POSITIVE_MESSAGE = "Please enter an amount greater than $0."
AMOUNT_PRECISION_MESSAGE = "Please enter an amount with at most two decimal places."
STATUS_MESSAGE = "Please select an invoice status."

# invoices.amount is a 32-bit integer column holding cents
MAX_AMOUNT_CENTS = 2**31 - 1
MAX_AMOUNT = cents_to_dollars(MAX_AMOUNT_CENTS)
AMOUNT_MAX_MESSAGE = f"Please enter an amount no greater than {format_currency(MAX_AMOUNT_CENTS)}."
CENT = Decimal("0.01")

# python field name -> form field name
FORM_FIELDS = {"customer_id": "customerId", "amount": "amount", "status": "status"}


class InvoiceInput(BaseModel):
  model_config = ConfigDict(populate_by_name=True, frozen=True)

  customer_id: str = Field(default=None, alias="customerId", validate_default=True)
  amount: Decimal = Field(default=None, validate_default=True)  # dollars
  status: Literal["pending", "paid"] = Field(default=None, validate_default=True)

  @field_validator("customer_id", mode="before")
  @classmethod
  def _check_customer(cls, v: Any) -> str:
    if not isinstance(v, str) or not v.strip():
      raise PydanticCustomError("customer_id", CUSTOMER_MESSAGE)
    return v.strip()

  @field_validator("amount", mode="before")
  @classmethod
  def _check_amount(cls, v: Any) -> Decimal:
    # coerce first, then apply the business rules; bad input never becomes 0
    if v is None or isinstance(v, bool):
      raise PydanticCustomError("amount_invalid", AMOUNT_INVALID_MESSAGE)
    text = v.strip() if isinstance(v, str) else str(v)
    # no digit separators: "1_000" is rejected like "1,000"
    if "_" in text:
      raise PydanticCustomError("amount_invalid", AMOUNT_INVALID_MESSAGE)
    try:
      value = Decimal(text)
    except (DecimalException, ValueError):
      raise PydanticCustomError("amount_invalid", AMOUNT_INVALID_MESSAGE)
    if not value.is_finite():
      raise PydanticCustomError("amount_invalid", AMOUNT_INVALID_MESSAGE)
    if value <= 0:
      raise PydanticCustomError("amount_gt", AMOUNT_POSITIVE_MESSAGE)
    # bounded before quantize
    if value > MAX_AMOUNT:
      raise PydanticCustomError("amount_max", AMOUNT_MAX_MESSAGE)
    try:
      exact = value.quantize(CENT) == value
    except DecimalException:
      exact = False
    if not exact:
      raise PydanticCustomError("amount_precision", AMOUNT_PRECISION_MESSAGE)
    return value

  @field_validator("status", mode="before")
  @classmethod
  def _check_status(cls, v: Any) -> str:
    if v not in INVOICE_STATUSES:
      raise PydanticCustomError("status", STATUS_MESSAGE)
    return v


class ValidationResult(BaseModel):
  success: bool
  data: Optional[InvoiceInput] = None
  field_errors: Dict[str, List[str]] = Field(default_factory=dict)


def flatten_errors(exc: ValidationError) -> Dict[str, List[str]]:
  errors: Dict[str, List[str]] = {}
  for err in exc.errors():
    loc = str(err["loc"][0]) if err["loc"] else "form"
    name = FORM_FIELDS.get(loc, loc)
    errors.setdefault(name, []).append(err["msg"])
  return errors


def validate_invoice_input(raw_fields: Mapping[str, Any]) -> ValidationResult:
  """Check submitted invoice form fields.

  Every failing field is reported, keyed by its form name (``customerId``,
  ``amount``, ``status``). Nothing is returned in ``data`` unless all three
  fields pass.
  """
  try:
    data = InvoiceInput.model_validate(dict(raw_fields))
  except ValidationError as exc:
    return ValidationResult(success=False, field_errors=flatten_errors(exc))
  return ValidationResult(success=True, data=data)
