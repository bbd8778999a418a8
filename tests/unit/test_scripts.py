"""
Unit tests for the maintenance scripts -- sample data and branch lookup.
"""
import os
import sys
from datetime import date, timedelta

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from scripts.check_branches import main as check_branches_main, matching_branches
from scripts.generate_dummy_data import BRANCHES, ITEMS, make_invoice_lines
from __mocks__.fixtures import FakeTransactionSource, make_records

pytestmark = pytest.mark.unit


class TestMakeInvoiceLines:
    def test_seed_is_reproducible(self):
        today = date(2024, 6, 30)
        assert make_invoice_lines(20, seed=7, today=today) == make_invoice_lines(20, seed=7, today=today)

    def test_one_to_five_lines_per_invoice(self):
        lines = make_invoice_lines(30, seed=1)
        per_invoice = {}
        for line in lines:
            per_invoice[line["inv_no"]] = per_invoice.get(line["inv_no"], 0) + 1
        assert len(per_invoice) == 30
        assert all(1 <= count <= 5 for count in per_invoice.values())

    def test_values_in_range(self):
        today = date(2024, 6, 30)
        for line in make_invoice_lines(50, days=10, seed=3, today=today):
            assert today - timedelta(days=9) <= date.fromisoformat(line["inv_date"]) <= today
            assert line["branch_name"] in BRANCHES
            assert line["item"] in ITEMS
            assert 0 < line["cost"] < line["sale_price"]

    def test_invoice_lines_share_header_fields(self):
        lines = [line for line in make_invoice_lines(10, seed=5) if line["inv_no"] == "INV-00001"]
        assert len({(line["inv_date"], line["branch_name"], line["customer_name"]) for line in lines}) == 1


class TestMatchingBranches:
    BRANCHES = ["Main Branch", "North Branch", "Frozen Warehouse"]

    def test_no_patterns_returns_all(self):
        assert matching_branches(self.BRANCHES, []) == self.BRANCHES

    def test_case_insensitive_substring(self):
        assert matching_branches(self.BRANCHES, ["BRANCH"]) == ["Main Branch", "North Branch"]

    def test_any_pattern(self):
        assert matching_branches(self.BRANCHES, ["frozen", "north"]) == ["North Branch", "Frozen Warehouse"]

    def test_no_match(self):
        assert matching_branches(self.BRANCHES, ["south"]) == []


class TestCheckBranchesMain:
    def test_prints_branches_and_status(self, monkeypatch, capsys):
        source = FakeTransactionSource(
            rows=make_records(4, branches=("Main Branch", "North Branch")), optimized=False,
        )
        monkeypatch.setattr("scripts.check_branches.get_transaction_source", lambda: source)

        assert check_branches_main(["north"]) == ["North Branch"]
        out = capsys.readouterr().out
        assert '1. "North Branch"' in out
        assert "Records: 4" in out
        assert "NOT available" in out
