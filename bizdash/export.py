"""
Excel export of profit analysis transactions.
"""
import io
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from bizdash.models import TransactionRecord

EXPORT_COLUMNS = [
    ("Inv No", "inv_no"),
    ("Inv Date", "inv_date"),
    ("Item", "item"),
    ("Qty", "qty"),
    ("Sale Price", "sale_price"),
    ("Sale With VAT", "sale_with_vat"),
    ("Cost", "cost"),
    ("Profit", "profit"),
    ("Profit %", "profit_percent"),
    ("Customer Name", "customer_name"),
    ("Branch Name", "branch_name"),
    ("Sales Person", "sales_person_name"),
    ("Invoice Status", "invoice_status"),
]

MONEY_FIELDS = {"sale_price", "sale_with_vat", "cost", "profit"}


def build_transactions_workbook(records: List[TransactionRecord], title: str = "Transactions") -> Workbook:
    """Build a styled workbook with one row per transaction and a totals row."""
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    for col, (header, _) in enumerate(EXPORT_COLUMNS, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center', wrap_text=True)
        cell.border = thin_border

    for row_idx, record in enumerate(records, 2):
        for col_idx, (_, attr) in enumerate(EXPORT_COLUMNS, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=getattr(record, attr))
            cell.border = thin_border
            if attr in MONEY_FIELDS:
                cell.number_format = '#,##0.00'

    # Totals
    totals_row = len(records) + 2
    ws.cell(row=totals_row, column=1, value="Total").font = Font(bold=True)
    for col_idx, (_, attr) in enumerate(EXPORT_COLUMNS, 1):
        if attr in MONEY_FIELDS or attr == "qty":
            cell = ws.cell(row=totals_row, column=col_idx,
                           value=sum(getattr(record, attr) for record in records))
            cell.font = Font(bold=True)
            cell.number_format = '#,##0.00'

    # Adjust column widths
    for col in ws.columns:
        max_length = 0
        column = col[0].column_letter
        for cell in col:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column].width = min(max_length + 2, 50)

    return wb


def workbook_bytes(wb: Workbook) -> bytes:
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
