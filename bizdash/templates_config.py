"""
Shared Jinja2 templates configuration with custom filters.
All route modules should import templates from here.
"""
from datetime import date, datetime
from fastapi.templating import Jinja2Templates

from bizdash.config import TEMPLATES_DIR

templates = Jinja2Templates(directory=TEMPLATES_DIR)


def format_date(value, format_str='%Y-%m-%d'):
    """Format a date/datetime object or string to date string."""
    if value is None or value == '':
        return '-'
    if isinstance(value, str):
        return value[:10] if len(value) >= 10 else value
    if isinstance(value, (date, datetime)):
        return value.strftime(format_str)
    return str(value)[:10] if len(str(value)) >= 10 else str(value)


def format_currency(value, symbol='SAR'):
    """Format an amount with thousands separators and two decimals."""
    if value is None or value == '':
        return '-'
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return str(value)
    sign = '-' if amount < 0 else ''
    return f"{sign}{symbol} {abs(amount):,.2f}"


def format_percent(value):
    if value is None or value == '':
        return '-'
    return f"{float(value):.2f}%"


# Register custom filters
templates.env.filters['format_date'] = format_date
templates.env.filters['format_currency'] = format_currency
templates.env.filters['format_percent'] = format_percent
