"""Tests for data.py: listing, pagination and reporting queries."""

import datetime as dt

import pytest
from sqlmodel import SQLModel

from data import (
  ITEMS_PER_PAGE,
  fetch_card_data,
  fetch_customers,
  fetch_filtered_customers,
  fetch_filtered_invoices,
  fetch_invoice_by_id,
  fetch_invoices_pages,
  fetch_latest_invoices,
  fetch_revenue,
)
from errors import DataFetchError
from models import Revenue

from conftest import add_all, make_invoice

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _seed_many(engine, count: int = 14) -> None:
  """Invoices spread across customers; every date is shared by two rows."""
  customers = ["c1", "c2", "c3"]
  rows = []
  for i in range(count):
    rows.append(
      make_invoice(
        customers[i % 3],
        1000 + i,
        "paid" if i % 2 else "pending",
        dt.date(2023, 1, 1) + dt.timedelta(days=i // 2),
        invoice_id=f"inv-{i:02d}",
      )
    )
  add_all(engine, rows)


# ---------------------------------------------------------------------------
# fetch_filtered_invoices / fetch_invoices_pages
# ---------------------------------------------------------------------------


class TestFilteredInvoices:
  def test_first_page_ordered_by_date_then_id(self, db_engine, session):
    _seed_many(db_engine)
    rows = fetch_filtered_invoices(session, "", 1)
    assert len(rows) == ITEMS_PER_PAGE
    keys = [(r.date, r.id) for r in rows]
    assert keys == sorted(keys, reverse=True)
    assert rows[0].id == "inv-13"
    assert rows[0].name == "Lee Robinson"
    assert rows[0].email == "lee@robinson.com"
    assert rows[0].image_url == "/customers/lee.png"

  def test_pages_cover_every_match_once(self, db_engine, session):
    _seed_many(db_engine)
    pages = fetch_invoices_pages(session, "")
    assert pages == 3
    seen = []
    for page in range(1, pages + 1):
      seen.extend(r.id for r in fetch_filtered_invoices(session, "", page))
    assert len(seen) == len(set(seen)) == 14
    assert fetch_filtered_invoices(session, "", pages + 1) == []

  def test_page_count_matches_filtered_rows(self, db_engine, session):
    _seed_many(db_engine)
    pages = fetch_invoices_pages(session, "lee")
    matched = []
    for page in range(1, pages + 1):
      matched.extend(fetch_filtered_invoices(session, "lee", page))
    assert pages * ITEMS_PER_PAGE >= len(matched)
    assert len(matched) == 5
    assert all(r.name == "Lee Robinson" for r in matched)

  def test_page_below_one_is_first_page(self, db_engine, session):
    _seed_many(db_engine)
    assert fetch_filtered_invoices(session, "", 0) == fetch_filtered_invoices(session, "", 1)

  @pytest.mark.parametrize(
    "query, expected",
    [
      ("DELBA", {"inv-00", "inv-03"}),
      ("robinson.com", {"inv-01"}),
      ("1003", {"inv-03"}),
      ("2023-01-02", {"inv-02", "inv-03"}),
      ("PAID", {"inv-01", "inv-03"}),
    ],
  )
  def test_search_is_case_insensitive_across_fields(self, db_engine, session, query, expected):
    _seed_many(db_engine, count=4)
    rows = fetch_filtered_invoices(session, query, 1)
    assert {r.id for r in rows} == expected

  def test_wildcards_are_matched_literally(self, db_engine, session):
    _seed_many(db_engine, count=4)
    assert fetch_filtered_invoices(session, "%", 1) == []
    assert fetch_filtered_invoices(session, "_", 1) == []
    assert fetch_invoices_pages(session, "%") == 0

  def test_no_invoices_means_no_pages(self, session):
    assert fetch_invoices_pages(session, "") == 0
    assert fetch_filtered_invoices(session, "", 1) == []


# ---------------------------------------------------------------------------
# fetch_card_data
# ---------------------------------------------------------------------------


class TestCardData:
  def test_totals_by_status(self, db_engine, session):
    add_all(db_engine, [
      make_invoice("c1", 1000, "paid", dt.date(2023, 1, 1)),
      make_invoice("c2", 500, "pending", dt.date(2023, 1, 2)),
    ])
    cards = fetch_card_data(session)
    assert cards.number_of_invoices == 2
    assert cards.number_of_customers == 3
    assert cards.total_paid_invoices == "$10.00"
    assert cards.total_pending_invoices == "$5.00"
    assert cards.model_dump(by_alias=True) == {
      "numberOfInvoices": 2,
      "numberOfCustomers": 3,
      "totalPaidInvoices": "$10.00",
      "totalPendingInvoices": "$5.00",
    }

  def test_other_statuses_count_in_neither_total(self, db_engine, session):
    add_all(db_engine, [
      make_invoice("c1", 1000, "paid", dt.date(2023, 1, 1)),
      make_invoice("c1", 7000, "overdue", dt.date(2023, 1, 1)),
    ])
    cards = fetch_card_data(session)
    assert cards.number_of_invoices == 2
    assert cards.total_paid_invoices == "$10.00"
    assert cards.total_pending_invoices == "$0.00"

  def test_empty_store(self, session):
    cards = fetch_card_data(session)
    assert cards.number_of_invoices == 0
    assert cards.total_paid_invoices == "$0.00"


# ---------------------------------------------------------------------------
# remaining reads
# ---------------------------------------------------------------------------


def test_latest_invoices_are_five_newest_formatted(db_engine, session):
  _seed_many(db_engine)
  latest = fetch_latest_invoices(session)
  assert [i.id for i in latest] == ["inv-13", "inv-12", "inv-11", "inv-10", "inv-09"]
  assert latest[0].amount == "$10.13"
  assert latest[0].name == "Lee Robinson"


def test_invoice_by_id_converts_to_dollars(db_engine, session):
  add_all(db_engine, [make_invoice("c2", 15795, "pending", dt.date(2022, 12, 6), invoice_id="inv-x")])
  form = fetch_invoice_by_id(session, "inv-x")
  assert str(form.amount) == "157.95"
  assert form.customer_id == "c2"
  assert fetch_invoice_by_id(session, "missing") is None


def test_customers_sorted_by_name(session):
  assert [c.name for c in fetch_customers(session)] == [
    "Delba de Oliveira",
    "Hector Simpson",
    "Lee Robinson",
  ]


def test_filtered_customers_totals(db_engine, session):
  add_all(db_engine, [
    make_invoice("c1", 1000, "paid", dt.date(2023, 1, 1)),
    make_invoice("c1", 250, "pending", dt.date(2023, 1, 2)),
    make_invoice("c1", 125, "pending", dt.date(2023, 1, 3)),
  ])
  rows = fetch_filtered_customers(session, "")
  by_id = {r.id: r for r in rows}
  assert [r.name for r in rows] == ["Delba de Oliveira", "Hector Simpson", "Lee Robinson"]
  assert by_id["c1"].total_invoices == 3
  assert by_id["c1"].total_paid == "$10.00"
  assert by_id["c1"].total_pending == "$3.75"
  assert by_id["c2"].total_invoices == 0
  assert by_id["c2"].total_paid == "$0.00"

  assert [r.id for r in fetch_filtered_customers(session, "SIMPSON")] == ["c3"]


def test_revenue_rows(db_engine, session):
  add_all(db_engine, [Revenue(month="Jan", revenue=2000), Revenue(month="Feb", revenue=1800)])
  months = {r.month: r.revenue for r in fetch_revenue(session)}
  assert months == {"Jan": 2000, "Feb": 1800}


def test_storage_failure_raises_generic_error(db_engine, session):
  SQLModel.metadata.drop_all(db_engine)
  with pytest.raises(DataFetchError) as excinfo:
    fetch_filtered_invoices(session, "", 1)
  assert str(excinfo.value) == "Failed to fetch invoices."
  assert "no such table" not in str(excinfo.value)

  with pytest.raises(DataFetchError, match="Failed to fetch card data."):
    fetch_card_data(session)
