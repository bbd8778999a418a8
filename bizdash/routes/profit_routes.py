"""
Profit analysis routes: paginated transactions page and JSON API, KPIs,
branches, backend status and Excel export.
"""
import io
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Request, Query
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, StreamingResponse

from bizdash.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, FALLBACK_MAX_ROWS, REQUEST_TIMEOUT_SECONDS
from bizdash.dependencies import get_current_user, auth_redirect, source_for_user
from bizdash.errors import ERROR_AUTH, FallbackTooLargeError, classify_error, is_session_expired_error
from bizdash.export import build_transactions_workbook, workbook_bytes
from bizdash.fetcher import PaginatedTransactionsFetcher
from bizdash.kpis import calculate_dashboard_kpis, monthly_chart_series
from bizdash.models import DateRange, FetchStatus
from bizdash.templates_config import templates
from bizdash.timeouts import run_blocking

logger = logging.getLogger(__name__)

router = APIRouter()


def _unauthorized():
    return JSONResponse({"error": "Unauthorized"}, status_code=401)


def _bad_request(message: str):
    return JSONResponse({"error": message}, status_code=400)


def _backend_error(exc: Exception):
    if is_session_expired_error(exc):
        status_code = 401
    elif isinstance(exc, FallbackTooLargeError):
        status_code = 413
    else:
        status_code = 502
    return JSONResponse(
        {"error": str(exc), "detail": classify_error(exc).to_dict()},
        status_code=status_code,
    )


def default_date_range(today: Optional[date] = None) -> DateRange:
    """Month to date."""
    today = today or date.today()
    return DateRange(today.replace(day=1), today)


async def load_filtered_rows(source, date_range: DateRange, branch: Optional[str]):
    """Every row for the filters, bounded like the pagination fallback."""
    limit = FALLBACK_MAX_ROWS + 1 if FALLBACK_MAX_ROWS else None
    rows = await run_blocking(
        source.fetch_all, date_range.start_param, date_range.end_param, branch or None,
        limit=limit, timeout=REQUEST_TIMEOUT_SECONDS,
    )
    if FALLBACK_MAX_ROWS and len(rows) > FALLBACK_MAX_ROWS:
        raise FallbackTooLargeError(FALLBACK_MAX_ROWS)
    return rows


@router.get("", response_class=HTMLResponse)
@router.get("/", response_class=HTMLResponse)
async def transactions_page(
    request: Request,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    branch: Optional[str] = None,
    offset: int = Query(0, ge=0),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """Transactions table with error, empty and data states."""
    user = auth_redirect(request)
    if not isinstance(user, dict):
        return user

    error = None
    try:
        if start_date and end_date:
            date_range = DateRange(start_date, end_date)
        else:
            date_range = default_date_range()
    except ValueError as exc:
        date_range = None
        error = str(exc)

    source = source_for_user(user)
    fetcher = PaginatedTransactionsFetcher(
        source, page_size=page_size, date_range=date_range, branch_filter=branch,
    )
    if date_range is not None:
        await fetcher.load_page(offset)
    if fetcher.error_type == ERROR_AUTH and user.get("access_token"):
        # Token rejected by the backend: drop the cookie and sign in again
        return RedirectResponse(url="/logout", status_code=302)

    try:
        branches = await run_blocking(source.list_branches, timeout=REQUEST_TIMEOUT_SECONDS)
    except Exception as exc:
        logger.warning("Could not load branch list: %s", exc)
        branches = []

    state = fetcher.snapshot()
    pagination = fetcher.pagination
    return templates.TemplateResponse(request, "transactions.html", {
        "user": user,
        "state": state,
        "records": fetcher.data,
        "pagination": pagination,
        "error": error or fetcher.error,
        "is_optimized": fetcher.is_optimized,
        "date_range": date_range,
        "branch": branch or "",
        "branches": branches,
        "page_size": page_size,
        "prev_offset": max(0, pagination.current_offset - page_size) if pagination.current_offset > 0 else None,
        "next_offset": pagination.current_offset + page_size if pagination.has_more else None,
    })


@router.get("/api/transactions")
async def transactions_api(
    request: Request,
    start_date: date,
    end_date: date,
    branch: Optional[str] = None,
    offset: int = Query(0, ge=0),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """One page of transactions plus pagination metadata."""
    user = get_current_user(request)
    if not user:
        return _unauthorized()

    try:
        date_range = DateRange(start_date, end_date)
    except ValueError as exc:
        return _bad_request(str(exc))

    fetcher = PaginatedTransactionsFetcher(
        source_for_user(user), page_size=page_size, date_range=date_range, branch_filter=branch,
    )
    await fetcher.load_page(offset)
    if fetcher.status != FetchStatus.FAILED:
        status_code = 200
    elif fetcher.error_type == ERROR_AUTH:
        status_code = 401
    else:
        status_code = 502
    return JSONResponse(fetcher.snapshot(), status_code=status_code)


@router.get("/api/kpis")
async def kpis_api(request: Request, start_date: date, end_date: date, branch: Optional[str] = None):
    """KPI cards and monthly chart series for the filters."""
    user = get_current_user(request)
    if not user:
        return _unauthorized()

    try:
        date_range = DateRange(start_date, end_date)
    except ValueError as exc:
        return _bad_request(str(exc))

    try:
        rows = await load_filtered_rows(source_for_user(user), date_range, branch)
    except Exception as exc:
        logger.error("Error loading KPI data: %s", exc)
        return _backend_error(exc)

    return JSONResponse({
        "kpis": calculate_dashboard_kpis(rows, date_range),
        "charts": monthly_chart_series(rows),
        "dateRange": {"from": date_range.start_param, "to": date_range.end_param},
    })


@router.get("/api/branches")
async def branches_api(request: Request):
    """Branch names for the branch filter."""
    user = get_current_user(request)
    if not user:
        return _unauthorized()

    try:
        branches = await run_blocking(source_for_user(user).list_branches,
                                      timeout=REQUEST_TIMEOUT_SECONDS)
    except Exception as exc:
        logger.error("Error loading branches: %s", exc)
        return _backend_error(exc)
    return JSONResponse({"branches": branches})


@router.get("/api/status")
async def status_api(request: Request):
    """Whether server-side pagination is installed, and record count."""
    user = get_current_user(request)
    if not user:
        return _unauthorized()

    try:
        metrics = await run_blocking(source_for_user(user).performance_metrics,
                                     timeout=REQUEST_TIMEOUT_SECONDS)
    except Exception as exc:
        logger.error("Error checking backend status: %s", exc)
        return _backend_error(exc)
    return JSONResponse(metrics)


@router.get("/export")
async def export_transactions(request: Request, start_date: date, end_date: date,
                              branch: Optional[str] = None):
    """Export the filtered transactions to Excel."""
    user = get_current_user(request)
    if not user:
        return _unauthorized()

    try:
        date_range = DateRange(start_date, end_date)
    except ValueError as exc:
        return _bad_request(str(exc))

    try:
        rows = await load_filtered_rows(source_for_user(user), date_range, branch)
    except Exception as exc:
        logger.error("Error exporting transactions: %s", exc)
        return _backend_error(exc)

    content = workbook_bytes(build_transactions_workbook(rows))
    filename = f"transactions_{date_range.start_param}_{date_range.end_param}.xlsx"
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
