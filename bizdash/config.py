"""
Application configuration settings.
"""
import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env file if it exists (for local development)
env_file = BASE_DIR / ".env"
if env_file.exists():
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                os.environ.setdefault(key.strip(), value.strip())


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    return int(value) if value else default


# Database - Support both SQLite (local) and PostgreSQL (production)
DATABASE_URL = os.getenv("DATABASE_URL", "")
DATABASE_PATH = BASE_DIR / "bizdash.db"

# Determine if using PostgreSQL
USE_POSTGRES = DATABASE_URL.startswith("postgres")

# Heroku-style postgres:// but psycopg2 needs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# Supabase - common naming conventions, the NEXT_PUBLIC_ ones come from the web front end
SUPABASE_URL = (os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "").strip()
SUPABASE_ANON_KEY = (os.getenv("SUPABASE_ANON_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY") or "").strip()

# Which backend serves transaction data: "sql" (get_db) or "supabase"
DATA_BACKEND = os.getenv("DATA_BACKEND", "supabase" if SUPABASE_URL else "sql").strip().lower()

# Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
SESSION_COOKIE_NAME = "bizdash_session"
SESSION_MAX_AGE = 60 * 60 * 8  # 8 hours in seconds
# Without Supabase there is nothing to sign in against
AUTH_ENABLED = _env_bool("AUTH_ENABLED", bool(SUPABASE_URL))

# Pagination
DEFAULT_PAGE_SIZE = _env_int("DEFAULT_PAGE_SIZE", 50)
MAX_PAGE_SIZE = _env_int("MAX_PAGE_SIZE", 500)

# Backend calls
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30") or 30)

# Upper bound on rows pulled into memory by the client-side pagination fallback.
# 0 disables the cap.
FALLBACK_MAX_ROWS = _env_int("FALLBACK_MAX_ROWS", 10000)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# File paths
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# Relations used by the data layer
PROFIT_VIEW = "profit_analysis_view_current"
OPTIMIZED_VIEW = "profit_transactions_optimized"
PAGINATION_RPC = "get_paginated_transactions"

# Invoice line VAT (KSA standard rate)
VAT_RATE = 0.15
