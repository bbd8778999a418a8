"""
Dashboard KPIs and monthly chart series computed from transaction records.
"""
from typing import List, Optional

import pandas as pd

from bizdash.models import DateRange, TransactionRecord

KPI_KEYS = [
    "totalRevenue", "totalProfit", "profitMargin", "taxableSales", "totalQuantity",
    "totalCost", "averageOrderValue", "totalInvoices", "grossProfit",
    "grossProfitPercentage", "dailyAvgSales", "visits",
]

# Daily average denominator when no date range is selected
DEFAULT_PERIOD_DAYS = 30


def empty_kpis() -> dict:
    kpis = {key: 0.0 for key in KPI_KEYS}
    kpis["totalInvoices"] = 0
    kpis["visits"] = 0
    return kpis


def calculate_dashboard_kpis(records: List[TransactionRecord],
                             date_range: Optional[DateRange] = None) -> dict:
    """
    Summarise invoice lines into the KPI cards.
    Revenue includes VAT, taxable sales exclude it; gross profit is taxable
    sales minus cost. Invoices are counted by distinct invoice number.
    """
    if not records:
        return empty_kpis()

    total_revenue = sum(r.sale_with_vat for r in records)
    total_profit = sum(r.profit for r in records)
    taxable_sales = sum(r.sale_price for r in records)
    total_quantity = sum(r.qty for r in records)
    total_cost = sum(r.cost for r in records)
    total_invoices = len({r.inv_no for r in records})

    gross_profit = taxable_sales - total_cost
    days = (date_range.days or 1) if date_range is not None else DEFAULT_PERIOD_DAYS

    return {
        "totalRevenue": total_revenue,
        "totalProfit": total_profit,
        "profitMargin": (total_profit / total_revenue * 100) if total_revenue > 0 else 0.0,
        "taxableSales": taxable_sales,
        "totalQuantity": total_quantity,
        "totalCost": total_cost,
        "averageOrderValue": (total_revenue / total_invoices) if total_invoices > 0 else 0.0,
        "totalInvoices": total_invoices,
        "grossProfit": gross_profit,
        "grossProfitPercentage": (gross_profit / taxable_sales * 100) if taxable_sales > 0 else 0.0,
        "dailyAvgSales": taxable_sales / days,
        "visits": total_invoices,
    }


def monthly_chart_series(records: List[TransactionRecord]) -> dict:
    """Group records by yyyy-mm into revenue, profit and margin % series."""
    series = {"revenueChart": [], "profitChart": [], "marginChart": []}
    dated = [r for r in records if r.inv_date]
    if not dated:
        return series

    df = pd.DataFrame({
        "month": [r.inv_date[:7] for r in dated],
        "revenue": [r.sale_with_vat for r in dated],
        "profit": [r.profit for r in dated],
    })
    monthly = df.groupby("month", sort=True)[["revenue", "profit"]].sum()

    for month, row in monthly.iterrows():
        revenue = float(row["revenue"])
        profit = float(row["profit"])
        series["revenueChart"].append({"date": month, "value": revenue, "label": "Revenue"})
        series["profitChart"].append({"date": month, "value": profit, "label": "Profit"})
        series["marginChart"].append({
            "date": month,
            "value": (profit / revenue * 100) if revenue > 0 else 0.0,
            "label": "Margin %",
        })
    return series
