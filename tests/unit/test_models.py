"""
Unit tests for bizdash/models.py -- date ranges, records, pagination state.
"""
import os
import sys
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
os.environ.setdefault("DATABASE_URL", "")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from bizdash.models import (
    DateRange, PaginationState, TransactionRecord, format_date_local, local_date,
)

pytestmark = pytest.mark.unit


# ── Dates ────────────────────────────────────────────────────────────

class TestLocalDates:
    def test_plain_date(self):
        assert format_date_local(date(2024, 3, 9)) == "2024-03-09"

    def test_naive_datetime_keeps_calendar_day(self):
        assert format_date_local(datetime(2024, 3, 9, 23, 59)) == "2024-03-09"

    def test_aware_datetime_uses_local_zone_not_utc(self):
        # Just after local midnight: the UTC rendering could be the previous day
        local_midnight = datetime(2024, 3, 9, 0, 30).astimezone()
        assert format_date_local(local_midnight) == "2024-03-09"

    def test_aware_datetime_in_other_zone_is_converted(self):
        moment = datetime(2024, 3, 9, 12, 0, tzinfo=timezone(timedelta(hours=3)))
        assert local_date(moment) == moment.astimezone().date()


class TestDateRange:
    def test_params(self):
        rng = DateRange(date(2024, 1, 1), date(2024, 1, 31))
        assert rng.start_param == "2024-01-01"
        assert rng.end_param == "2024-01-31"

    def test_days(self):
        assert DateRange(date(2024, 1, 1), date(2024, 1, 31)).days == 30

    def test_single_day(self):
        assert DateRange(date(2024, 1, 1), date(2024, 1, 1)).days == 0

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            DateRange(date(2024, 2, 1), date(2024, 1, 31))


# ── TransactionRecord ────────────────────────────────────────────────

class TestTransactionRecord:
    def test_from_row(self):
        row = {
            "inv_no": "INV-1", "inv_date": date(2024, 1, 5), "item": "RICE", "qty": 2,
            "sale_price": Decimal("10.50"), "sale_with_vat": Decimal("12.08"), "cost": 7,
            "profit": 3.5, "profit_percent": 33.33, "customer_name": "A",
            "branch_name": "Main Branch", "sales_person_name": None, "invoice_status": "Open",
        }
        record = TransactionRecord.from_row(row)
        assert record.inv_date == "2024-01-05"
        assert record.sale_price == 10.5
        assert isinstance(record.sale_with_vat, float)
        assert record.sales_person_name == ""

    def test_from_view_row(self):
        row = {
            "Inv No": "INV-2", "Inv Date": "2024-01-06T00:00:00", "Item": "OIL", "Qty": 1,
            "Sale Price": 20, "SaleWithVAT": 23, "Cost": 15, "Profit": 5, "Profit %": 25,
            "Customer Name": "B", "Branch Name": "North Branch",
            "Sales Person Name": "COUNTER SALES", "Invoice Status": "Closed",
        }
        record = TransactionRecord.from_view_row(row)
        assert record.inv_no == "INV-2"
        assert record.inv_date == "2024-01-06"
        assert record.branch_name == "North Branch"
        assert record.profit_percent == 25.0

    def test_from_rpc(self):
        row = {
            "invNo": "INV-3", "invDate": "2024-01-07", "item": "MILK", "qty": 3,
            "salePrice": 30, "saleWithVAT": 34.5, "cost": 20, "profit": 10,
            "profitPercent": 33.3, "customerName": "C", "branchName": "East Branch",
            "salesPersonName": "Omar", "invoiceStatus": "Open",
        }
        record = TransactionRecord.from_rpc(row)
        assert record.inv_no == "INV-3"
        assert record.sale_with_vat == 34.5
        assert record.branch_name == "East Branch"

    def test_missing_numbers_become_zero(self):
        record = TransactionRecord.from_rpc({"invNo": "INV-4", "invDate": None, "item": None})
        assert record.qty == 0.0
        assert record.inv_date == ""
        assert record.item == ""

    def test_records_are_immutable(self):
        record = TransactionRecord(inv_no="X", inv_date="2024-01-01", item="Y")
        with pytest.raises(Exception):
            record.qty = 5

    def test_to_dict(self):
        record = TransactionRecord(inv_no="X", inv_date="2024-01-01", item="Y")
        assert record.to_dict()["inv_no"] == "X"
        assert "branch_name" in record.to_dict()


# ── PaginationState ──────────────────────────────────────────────────

class TestPaginationState:
    def test_scenario_125_by_50(self):
        first = PaginationState.compute(125, 50, 0)
        last = PaginationState.compute(125, 50, 100)
        assert first.total_pages == 3
        assert first.has_more is True
        assert last.has_more is False
        assert last.current_page == 2

    def test_exact_multiple(self):
        state = PaginationState.compute(100, 50, 50)
        assert state.total_pages == 2
        assert state.has_more is False

    def test_zero_total(self):
        state = PaginationState.compute(0, 50, 0)
        assert state.total_pages == 0
        assert state.has_more is False

    def test_rejects_bad_page_size(self):
        with pytest.raises(ValueError):
            PaginationState.compute(10, 0, 0)

    def test_empty(self):
        state = PaginationState.empty(25, offset=75)
        assert state.total_count == 0
        assert state.page_size == 25
        assert state.current_offset == 75
        assert state.has_more is False
        assert state.total_pages == 0

    def test_to_dict_uses_camel_case(self):
        assert PaginationState.compute(7, 10, 0).to_dict() == {
            "totalCount": 7, "pageSize": 10, "currentOffset": 0, "hasMore": False, "totalPages": 1,
        }
