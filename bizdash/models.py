"""
Data model for profit analysis transactions and their pagination.
"""
import enum
import math
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import List, Union


def _num(value) -> float:
    if value is None or value == "":
        return 0.0
    return float(value)


def _text(value) -> str:
    return "" if value is None else str(value)


def _date_text(value) -> str:
    # PostgreSQL hands back date objects, SQLite and PostgREST hand back strings
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]


def local_date(value: Union[date, datetime]) -> date:
    """Calendar date of `value` in the local timezone (never UTC)."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def format_date_local(value: Union[date, datetime]) -> str:
    """Render a date as yyyy-mm-dd for backend filters."""
    return local_date(value).strftime("%Y-%m-%d")


@dataclass(frozen=True)
class DateRange:
    """Inclusive date bounds supplied by the caller."""
    start: Union[date, datetime]
    end: Union[date, datetime]

    def __post_init__(self):
        if local_date(self.end) < local_date(self.start):
            raise ValueError("Date range end is before its start")

    @property
    def start_param(self) -> str:
        return format_date_local(self.start)

    @property
    def end_param(self) -> str:
        return format_date_local(self.end)

    @property
    def days(self) -> int:
        return (local_date(self.end) - local_date(self.start)).days


@dataclass(frozen=True)
class TransactionRecord:
    """One sales-invoice line as shown in the transactions table."""
    inv_no: str
    inv_date: str
    item: str
    qty: float = 0.0
    sale_price: float = 0.0
    sale_with_vat: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    profit_percent: float = 0.0
    customer_name: str = ""
    branch_name: str = ""
    sales_person_name: str = ""
    invoice_status: str = ""

    @classmethod
    def from_row(cls, row) -> "TransactionRecord":
        """Build from a SQL row of the profit analysis view (snake_case columns)."""
        return cls(
            inv_no=_text(row["inv_no"]),
            inv_date=_date_text(row["inv_date"]),
            item=_text(row["item"]),
            qty=_num(row["qty"]),
            sale_price=_num(row["sale_price"]),
            sale_with_vat=_num(row["sale_with_vat"]),
            cost=_num(row["cost"]),
            profit=_num(row["profit"]),
            profit_percent=_num(row["profit_percent"]),
            customer_name=_text(row["customer_name"]),
            branch_name=_text(row["branch_name"]),
            sales_person_name=_text(row["sales_person_name"]),
            invoice_status=_text(row["invoice_status"]),
        )

    @classmethod
    def from_view_row(cls, row: dict) -> "TransactionRecord":
        """Build from a PostgREST row of the labelled profit analysis view."""
        return cls(
            inv_no=_text(row.get("Inv No")),
            inv_date=_date_text(row.get("Inv Date")),
            item=_text(row.get("Item")),
            qty=_num(row.get("Qty")),
            sale_price=_num(row.get("Sale Price")),
            sale_with_vat=_num(row.get("SaleWithVAT")),
            cost=_num(row.get("Cost")),
            profit=_num(row.get("Profit")),
            profit_percent=_num(row.get("Profit %")),
            customer_name=_text(row.get("Customer Name")),
            branch_name=_text(row.get("Branch Name")),
            sales_person_name=_text(row.get("Sales Person Name")),
            invoice_status=_text(row.get("Invoice Status")),
        )

    @classmethod
    def from_rpc(cls, row: dict) -> "TransactionRecord":
        """Build from a row of the paginated transactions RPC (camelCase)."""
        return cls(
            inv_no=_text(row.get("invNo")),
            inv_date=_date_text(row.get("invDate")),
            item=_text(row.get("item")),
            qty=_num(row.get("qty")),
            sale_price=_num(row.get("salePrice")),
            sale_with_vat=_num(row.get("saleWithVAT")),
            cost=_num(row.get("cost")),
            profit=_num(row.get("profit")),
            profit_percent=_num(row.get("profitPercent")),
            customer_name=_text(row.get("customerName")),
            branch_name=_text(row.get("branchName")),
            sales_person_name=_text(row.get("salesPersonName")),
            invoice_status=_text(row.get("invoiceStatus")),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PaginationState:
    total_count: int = 0
    page_size: int = 50
    current_offset: int = 0
    has_more: bool = False
    total_pages: int = 0

    @classmethod
    def compute(cls, total_count: int, page_size: int, offset: int) -> "PaginationState":
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        total_count = max(0, int(total_count))
        return cls(
            total_count=total_count,
            page_size=page_size,
            current_offset=offset,
            has_more=offset + page_size < total_count,
            total_pages=math.ceil(total_count / page_size),
        )

    @classmethod
    def empty(cls, page_size: int, offset: int = 0) -> "PaginationState":
        return cls(total_count=0, page_size=page_size, current_offset=offset,
                   has_more=False, total_pages=0)

    @property
    def current_page(self) -> int:
        return self.current_offset // self.page_size

    def to_dict(self) -> dict:
        return {
            "totalCount": self.total_count,
            "pageSize": self.page_size,
            "currentOffset": self.current_offset,
            "hasMore": self.has_more,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class FetchOutcome:
    """One page served either by the optimized path or by the fallback."""
    data: List[TransactionRecord] = field(default_factory=list)
    pagination: PaginationState = field(default_factory=PaginationState)
    is_optimized: bool = False


class FetchStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    OPTIMIZED = "optimized"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class SourcePage:
    """What the optimized collaborator returns: one page and the filtered total."""
    rows: List[TransactionRecord]
    total_count: int
