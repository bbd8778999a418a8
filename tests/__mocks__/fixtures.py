"""
Shared test fixtures -- records, invoice lines and fake transaction sources.
"""
import threading
import time
from datetime import date, timedelta

from bizdash.models import SourcePage, TransactionRecord
from bizdash.sources import TransactionSource


# ── Records ──────────────────────────────────────────────────────────

def make_record(n=1, inv_date="2024-01-15", branch_name="Main Branch", qty=2.0,
                sale_price=100.0, cost=60.0, inv_no=None, item="RICE 5KG BAG"):
    profit = sale_price - cost
    return TransactionRecord(
        inv_no=inv_no or f"INV-{n:05d}",
        inv_date=inv_date,
        item=item,
        qty=qty,
        sale_price=sale_price,
        sale_with_vat=round(sale_price * 1.15, 2),
        cost=cost,
        profit=profit,
        profit_percent=round(profit * 100 / sale_price, 2) if sale_price else 0.0,
        customer_name="Cash Customer",
        branch_name=branch_name,
        sales_person_name="COUNTER SALES",
        invoice_status="Open",
    )


def make_records(count, start=date(2024, 1, 1), branches=("Main Branch",)):
    """`count` records on consecutive days, cycling through `branches`."""
    return [
        make_record(
            n=i + 1,
            inv_date=(start + timedelta(days=i % 28)).isoformat(),
            branch_name=branches[i % len(branches)],
        )
        for i in range(count)
    ]


def make_lines(count, start=date(2024, 1, 1)):
    """
    Invoice line dicts for insert_invoice_lines(): one line per invoice,
    dates spread over January, every fifth line on North Branch.
    """
    return [
        {
            "inv_no": f"INV-{i + 1:05d}",
            "inv_date": (start + timedelta(days=i % 31)).isoformat(),
            "item": "RICE 5KG BAG",
            "qty": 2,
            "sale_price": 100.0,
            "cost": 60.0,
            "customer_name": "Cash Customer",
            "branch_name": "North Branch" if i % 5 == 0 else "Main Branch",
            "sales_person_name": "COUNTER SALES",
            "invoice_status": "Open",
        }
        for i in range(count)
    ]


# ── Fake sources ─────────────────────────────────────────────────────

class FakeTransactionSource(TransactionSource):
    """
    In-memory source recording every call.
    optimized=False makes fetch_page report "not supported" (None).
    bulk_filters_branch=False makes fetch_all ignore the branch filter.
    """
    name = "fake"

    def __init__(self, rows=None, optimized=True, page_error=None, bulk_error=None,
                 bulk_filters_branch=True, page_delay=0.0):
        self.rows = list(rows or [])
        self.optimized = optimized
        self.page_error = page_error
        self.bulk_error = bulk_error
        self.bulk_filters_branch = bulk_filters_branch
        self.page_delay = page_delay
        self.page_calls = []
        self.bulk_calls = []

    def _matching(self, start_date, end_date, branch_filter):
        return [
            r for r in self.rows
            if (not start_date or r.inv_date >= start_date)
            and (not end_date or r.inv_date <= end_date)
            and (not branch_filter or r.branch_name == branch_filter)
        ]

    def fetch_page(self, page_size, page_offset, start_date, end_date, branch_filter):
        self.page_calls.append((page_size, page_offset, start_date, end_date, branch_filter))
        if self.page_delay:
            time.sleep(self.page_delay)
        if self.page_error is not None:
            raise self.page_error
        if not self.optimized:
            return None
        matching = self._matching(start_date, end_date, branch_filter)
        return SourcePage(rows=matching[page_offset:page_offset + page_size], total_count=len(matching))

    def fetch_all(self, start_date, end_date, branch_filter, limit=None):
        self.bulk_calls.append((start_date, end_date, branch_filter, limit))
        if self.bulk_error is not None:
            raise self.bulk_error
        matching = self._matching(
            start_date, end_date, branch_filter if self.bulk_filters_branch else None
        )
        return matching[:limit] if limit else matching

    def list_branches(self):
        return sorted({r.branch_name for r in self.rows if r.branch_name})

    def count_all(self):
        return len(self.rows)


class OutOfOrderSource(FakeTransactionSource):
    """The page at offset 0 only answers after a later page has been served."""

    def __init__(self, rows=None):
        super().__init__(rows=rows)
        self.later_page_served = threading.Event()

    def fetch_page(self, page_size, page_offset, start_date, end_date, branch_filter):
        if page_offset == 0:
            self.later_page_served.wait(timeout=5)
            return super().fetch_page(page_size, page_offset, start_date, end_date, branch_filter)
        try:
            return super().fetch_page(page_size, page_offset, start_date, end_date, branch_filter)
        finally:
            self.later_page_served.set()


# ── Users ────────────────────────────────────────────────────────────

TEST_ACCESS_TOKEN = "test-access-token"

TEST_USER = {
    "id": "6f1c2a9e-0000-4000-8000-000000000001",
    "email": "analyst@example.com",
    "name": "Test Analyst",
    "access_token": TEST_ACCESS_TOKEN,
}
