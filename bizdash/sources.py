"""
Backends that serve profit analysis transactions.

Every source offers two paths:
  fetch_page  - server-side filtered page plus total count. Returns None when
                the backend lacks the capability (view or RPC not installed);
                any other failure is raised.
  fetch_all   - every row matching the filters, used by client-side pagination.
"""
import logging
import sqlite3
from typing import List, Optional

from postgrest.exceptions import APIError

from bizdash.config import DATA_BACKEND, PROFIT_VIEW, OPTIMIZED_VIEW, PAGINATION_RPC
from bizdash.database import get_db
from bizdash.errors import BackendConfigError
from bizdash.models import SourcePage, TransactionRecord

logger = logging.getLogger(__name__)

# Stable ordering so that consecutive pages never overlap or skip rows
SQL_ORDER_BY = "inv_date, inv_no, line_id"

# PostgreSQL: undefined_table, undefined_function
MISSING_OBJECT_SQLSTATES = {"42P01", "42883"}

# PostgREST: function / relation not found in the schema cache, plus the SQLSTATEs
MISSING_OBJECT_API_CODES = {"PGRST202", "PGRST205", "42P01", "42883"}

# Rows requested per bulk round trip (PostgREST default max-rows)
BULK_BATCH_SIZE = 1000


class TransactionSource:
    name = "base"

    def fetch_page(self, page_size: int, page_offset: int, start_date: Optional[str],
                   end_date: Optional[str], branch_filter: Optional[str]) -> Optional[SourcePage]:
        raise NotImplementedError

    def fetch_all(self, start_date: Optional[str], end_date: Optional[str],
                  branch_filter: Optional[str], limit: Optional[int] = None) -> List[TransactionRecord]:
        raise NotImplementedError

    def list_branches(self) -> List[str]:
        raise NotImplementedError

    def optimized_available(self) -> bool:
        return self.fetch_page(1, 0, None, None, None) is not None

    def count_all(self) -> int:
        raise NotImplementedError

    def performance_metrics(self) -> dict:
        """Report whether server-side pagination is installed and how much data exists."""
        optimized = self.optimized_available()
        total = self.count_all()
        if optimized:
            action = "Server-side pagination is active"
        else:
            action = "Install the optimized pagination view/RPC to avoid client-side pagination"
        return {
            "backend": self.name,
            "optimizedAvailable": optimized,
            "totalRecords": total,
            "recommendedAction": action,
        }


def _is_missing_object(exc: Exception) -> bool:
    if isinstance(exc, sqlite3.OperationalError):
        return "no such table" in str(exc).lower()
    return getattr(exc, "pgcode", None) in MISSING_OBJECT_SQLSTATES


def _sql_filters(start_date, end_date, branch_filter):
    clauses = []
    params = []
    if start_date:
        clauses.append("inv_date >= ?")
        params.append(start_date)
    if end_date:
        clauses.append("inv_date <= ?")
        params.append(end_date)
    if branch_filter:
        clauses.append("branch_name = ?")
        params.append(branch_filter)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


class SqlTransactionSource(TransactionSource):
    """Reads the profit analysis views through get_db() (SQLite or PostgreSQL)."""
    name = "sql"

    def fetch_page(self, page_size, page_offset, start_date, end_date, branch_filter):
        where, params = _sql_filters(start_date, end_date, branch_filter)
        try:
            with get_db() as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT COUNT(*) AS total FROM {OPTIMIZED_VIEW} {where}", params)
                total = cursor.fetchone()["total"]
                cursor.execute(
                    f"SELECT * FROM {OPTIMIZED_VIEW} {where} ORDER BY {SQL_ORDER_BY} LIMIT ? OFFSET ?",
                    params + [page_size, page_offset],
                )
                rows = cursor.fetchall()
        except Exception as exc:
            if _is_missing_object(exc):
                logger.info("Optimized view %s not installed: %s", OPTIMIZED_VIEW, exc)
                return None
            raise
        return SourcePage(rows=[TransactionRecord.from_row(row) for row in rows], total_count=int(total))

    def fetch_all(self, start_date, end_date, branch_filter, limit=None):
        where, params = _sql_filters(start_date, end_date, branch_filter)
        query = f"SELECT * FROM {PROFIT_VIEW} {where} ORDER BY {SQL_ORDER_BY}"
        if limit:
            query += " LIMIT ?"
            params.append(limit)
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [TransactionRecord.from_row(row) for row in cursor.fetchall()]

    def list_branches(self):
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(f"""
                SELECT DISTINCT branch_name FROM {PROFIT_VIEW}
                WHERE branch_name IS NOT NULL AND branch_name <> ''
                ORDER BY branch_name
            """)
            return [row["branch_name"] for row in cursor.fetchall()]

    def count_all(self):
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT COUNT(*) AS total FROM {PROFIT_VIEW}")
            return int(cursor.fetchone()["total"])


class SupabaseTransactionSource(TransactionSource):
    """Reads through Supabase: the pagination RPC and the labelled profit view."""
    name = "supabase"

    def __init__(self, client):
        self.client = client

    def fetch_page(self, page_size, page_offset, start_date, end_date, branch_filter):
        try:
            response = self.client.rpc(PAGINATION_RPC, {
                "page_size": page_size,
                "page_offset": page_offset,
                "start_date": start_date or None,
                "end_date": end_date or None,
                "branch_filter": branch_filter or None,
            }).execute()
        except APIError as exc:
            if exc.code in MISSING_OBJECT_API_CODES:
                logger.info("Pagination RPC %s not available: %s", PAGINATION_RPC, exc.message)
                return None
            raise

        payload = response.data
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if not payload:
            logger.info("Pagination RPC %s returned no payload", PAGINATION_RPC)
            return None

        rows = [TransactionRecord.from_rpc(row) for row in payload.get("data") or []]
        total = (payload.get("pagination") or {}).get("totalCount", 0)
        return SourcePage(rows=rows, total_count=int(total))

    def _bulk_query(self, start_date, end_date, branch_filter):
        query = self.client.table(PROFIT_VIEW).select("*")
        if start_date:
            query = query.gte("Inv Date", start_date)
        if end_date:
            query = query.lte("Inv Date", end_date)
        if branch_filter:
            query = query.eq("Branch Name", branch_filter)
        return query.order("Inv Date").order("Inv No")

    def fetch_all(self, start_date, end_date, branch_filter, limit=None):
        """
        Read every matching row in ranged batches. PostgREST caps each
        response at its max-rows setting, which may be smaller than
        BULK_BATCH_SIZE, so only an empty batch or the limit ends the scan.
        """
        rows = []
        while not limit or len(rows) < limit:
            batch_size = BULK_BATCH_SIZE if not limit else min(BULK_BATCH_SIZE, limit - len(rows))
            start = len(rows)
            response = self._bulk_query(start_date, end_date, branch_filter) \
                .range(start, start + batch_size - 1).execute()
            batch = response.data or []
            if not batch:
                break
            rows.extend(TransactionRecord.from_view_row(row) for row in batch[:batch_size])
        logger.debug("Bulk read of %s returned %d rows", PROFIT_VIEW, len(rows))
        return rows

    def list_branches(self):
        response = self.client.table("branch").select("location_name").order("location_name").execute()
        names = {row.get("location_name") for row in response.data or []}
        return sorted(name for name in names if name)

    def count_all(self):
        response = self.client.table(PROFIT_VIEW).select("*", count="exact", head=True).execute()
        return int(response.count or 0)


def get_transaction_source(access_token: Optional[str] = None) -> TransactionSource:
    """Build the configured transaction source."""
    if DATA_BACKEND == "sql":
        return SqlTransactionSource()
    if DATA_BACKEND == "supabase":
        from bizdash.supabase_client import get_supabase
        return SupabaseTransactionSource(get_supabase(access_token))
    raise BackendConfigError(f"Unknown DATA_BACKEND '{DATA_BACKEND}' (expected 'sql' or 'supabase')")
