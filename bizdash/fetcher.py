"""
Paginated transactions fetcher.

Serves one page of profit analysis transactions for a date range and optional
branch, preferring the source's server-side pagination and falling back to
slicing the fully fetched result set when the source reports that server-side
pagination is not installed. Genuine backend errors never trigger the
fallback: they end the cycle in the FAILED state with the data cleared.

Every load takes a request token; a response that is no longer the latest one
is dropped instead of overwriting newer state.
"""
import logging
from typing import List, Optional

from bizdash.config import DEFAULT_PAGE_SIZE, REQUEST_TIMEOUT_SECONDS, FALLBACK_MAX_ROWS
from bizdash.errors import FallbackTooLargeError, classify_error
from bizdash.models import (
    DateRange, FetchOutcome, FetchStatus, PaginationState, TransactionRecord,
)
from bizdash.sources import TransactionSource
from bizdash.timeouts import run_blocking

logger = logging.getLogger(__name__)


class PaginatedTransactionsFetcher:
    def __init__(
        self,
        source: TransactionSource,
        page_size: int = DEFAULT_PAGE_SIZE,
        date_range: Optional[DateRange] = None,
        branch_filter: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        fallback_max_rows: Optional[int] = FALLBACK_MAX_ROWS or None,
    ):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.source = source
        self.page_size = page_size
        self.date_range = date_range
        self.branch_filter = branch_filter or None
        self.timeout = timeout
        self.fallback_max_rows = fallback_max_rows

        self.data: List[TransactionRecord] = []
        self.loading = False
        self.error: Optional[str] = None
        self.error_type: Optional[str] = None
        self.pagination = PaginationState.empty(page_size)
        self.is_optimized = False
        self.status = FetchStatus.IDLE
        self._request_seq = 0

    async def load_page(self, offset: int = 0) -> Optional[FetchOutcome]:
        """
        Load the page starting at `offset`.
        Returns the outcome that was applied, or None when nothing was applied
        (no date range, failure, or a newer load superseded this one).
        """
        if offset < 0:
            raise ValueError("offset must not be negative")
        # Any load still in flight belongs to the previous filters
        self._request_seq += 1
        token = self._request_seq
        if self.date_range is None:
            logger.warning("load_page(%d) skipped: no date range selected", offset)
            if self.loading:
                self.loading = False
                self.status = FetchStatus.IDLE
            return None

        self.loading = True
        self.error = None
        self.error_type = None
        self.status = FetchStatus.LOADING

        try:
            outcome = await self._fetch(offset)
        except Exception as exc:
            if token != self._request_seq:
                logger.info("Discarding stale failure for offset %d: %s", offset, exc)
                return None
            logger.error("Error loading paginated transactions at offset %d: %s", offset, exc)
            self.data = []
            self.pagination = PaginationState.empty(self.page_size, offset)
            self.is_optimized = False
            self.error = str(exc) or exc.__class__.__name__
            self.error_type = classify_error(exc).type
            self.status = FetchStatus.FAILED
            self.loading = False
            return None

        if token != self._request_seq:
            logger.info("Discarding stale response for offset %d", offset)
            return None

        self.data = outcome.data
        self.pagination = outcome.pagination
        self.is_optimized = outcome.is_optimized
        self.status = FetchStatus.OPTIMIZED if outcome.is_optimized else FetchStatus.FALLBACK
        self.loading = False
        return outcome

    async def _fetch(self, offset: int) -> FetchOutcome:
        start_date = self.date_range.start_param
        end_date = self.date_range.end_param

        page = await run_blocking(
            self.source.fetch_page, self.page_size, offset, start_date, end_date,
            self.branch_filter, timeout=self.timeout,
        )
        if page is not None:
            logger.debug("Optimized pagination served offset %d (%d rows)", offset, len(page.rows))
            return FetchOutcome(
                data=list(page.rows),
                pagination=PaginationState.compute(page.total_count, self.page_size, offset),
                is_optimized=True,
            )

        logger.info("Server-side pagination unavailable, paginating %s..%s client-side",
                    start_date, end_date)
        limit = self.fallback_max_rows + 1 if self.fallback_max_rows else None
        rows = await run_blocking(
            self.source.fetch_all, start_date, end_date, self.branch_filter,
            limit=limit, timeout=self.timeout,
        )
        if self.fallback_max_rows and len(rows) > self.fallback_max_rows:
            raise FallbackTooLargeError(self.fallback_max_rows)
        if self.branch_filter:
            rows = [row for row in rows if row.branch_name == self.branch_filter]

        return FetchOutcome(
            data=rows[offset:offset + self.page_size],
            pagination=PaginationState.compute(len(rows), self.page_size, offset),
            is_optimized=False,
        )

    async def next_page(self) -> Optional[FetchOutcome]:
        if not self.pagination.has_more:
            return None
        return await self.load_page(self.pagination.current_offset + self.page_size)

    async def prev_page(self) -> Optional[FetchOutcome]:
        if self.pagination.current_offset <= 0:
            return None
        return await self.load_page(max(0, self.pagination.current_offset - self.page_size))

    async def go_to_page(self, page: int) -> Optional[FetchOutcome]:
        offset = page * self.page_size
        if offset < 0 or offset >= self.pagination.total_count:
            return None
        return await self.load_page(offset)

    async def refresh(self) -> Optional[FetchOutcome]:
        return await self.load_page(self.pagination.current_offset)

    async def set_filters(self, date_range: Optional[DateRange] = None,
                          branch_filter: Optional[str] = None) -> Optional[FetchOutcome]:
        """Replace the filters and reload from the first page."""
        self.date_range = date_range
        self.branch_filter = branch_filter or None
        return await self.load_page(0)

    def snapshot(self) -> dict:
        """Caller-facing state, JSON ready."""
        return {
            "data": [record.to_dict() for record in self.data],
            "loading": self.loading,
            "error": self.error,
            "errorType": self.error_type,
            "pagination": self.pagination.to_dict(),
            "isOptimized": self.is_optimized,
            "status": self.status.value,
        }
