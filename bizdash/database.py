"""
Database connection and session management.
Supports both SQLite (local development) and PostgreSQL (production).
Holds the sales invoice line table, the profit analysis view built on it and
the optional optimized view that enables server-side pagination.
"""
import logging
import sqlite3
from contextlib import contextmanager

from bizdash.config import (
    DATABASE_PATH, DATABASE_URL, USE_POSTGRES, PROFIT_VIEW, OPTIMIZED_VIEW, VAT_RATE,
)

# PostgreSQL support
if USE_POSTGRES:
    import psycopg2
    from psycopg2.extras import RealDictCursor

logger = logging.getLogger(__name__)


class DictRow:
    """Wrapper to make psycopg2 results behave like sqlite3.Row"""
    def __init__(self, data):
        self._data = data
        self._keys = list(data.keys()) if data else []

    def __getitem__(self, key):
        if isinstance(key, int):
            return self._data[self._keys[key]]
        return self._data[key]

    def __iter__(self):
        return iter(self._data.values())

    def keys(self):
        return self._keys


def get_db_connection():
    """Create a database connection with row factory."""
    if USE_POSTGRES:
        return psycopg2.connect(DATABASE_URL)
    conn = sqlite3.connect(str(DATABASE_PATH))
    conn.row_factory = sqlite3.Row
    return conn


class PostgresCursorWrapper:
    """Wrapper to make PostgreSQL cursor behave like SQLite cursor"""
    def __init__(self, cursor):
        self._cursor = cursor

    def execute(self, query, params=None):
        # Convert SQLite ? placeholders to PostgreSQL %s
        query = query.replace('?', '%s')
        query = query.replace('INTEGER PRIMARY KEY AUTOINCREMENT', 'SERIAL PRIMARY KEY')
        if params:
            self._cursor.execute(query, params)
        else:
            self._cursor.execute(query)
        return self

    def executemany(self, query, params_list):
        query = query.replace('?', '%s')
        for params in params_list:
            self._cursor.execute(query, params)
        return self

    def fetchone(self):
        row = self._cursor.fetchone()
        return DictRow(row) if row else None

    def fetchall(self):
        rows = self._cursor.fetchall()
        return [DictRow(row) for row in rows]

    @property
    def rowcount(self):
        return self._cursor.rowcount


class PostgresConnection:
    """Connection facade exposing the sqlite3 connection methods we use."""
    def __init__(self, conn, cursor):
        self._conn = conn
        self._cursor = PostgresCursorWrapper(cursor)

    def cursor(self):
        return self._cursor

    def execute(self, *args, **kwargs):
        return self._cursor.execute(*args, **kwargs)

    def commit(self):
        return self._conn.commit()

    def rollback(self):
        return self._conn.rollback()


@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = get_db_connection()
    try:
        if USE_POSTGRES:
            cursor = conn.cursor(cursor_factory=RealDictCursor)
            yield PostgresConnection(conn, cursor)
        else:
            yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


PROFIT_VIEW_SELECT = f"""
    SELECT
        line_id,
        inv_no,
        inv_date,
        item,
        qty,
        sale_price,
        ROUND(CAST(sale_price * {1 + VAT_RATE} AS NUMERIC), 2) AS sale_with_vat,
        cost,
        sale_price - cost AS profit,
        CASE WHEN sale_price > 0
             THEN ROUND(CAST((sale_price - cost) * 100.0 / sale_price AS NUMERIC), 2)
             ELSE 0 END AS profit_percent,
        customer_name,
        branch_name,
        sales_person_name,
        invoice_status
    FROM sales_invoice_lines
"""


def init_database():
    """Initialize the database with all required tables and views."""
    with get_db() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS sales_invoice_lines (
                line_id INTEGER PRIMARY KEY AUTOINCREMENT,
                inv_no TEXT NOT NULL,
                inv_date DATE NOT NULL,
                item TEXT NOT NULL,
                qty DOUBLE PRECISION DEFAULT 0,
                sale_price DOUBLE PRECISION DEFAULT 0,
                cost DOUBLE PRECISION DEFAULT 0,
                customer_name TEXT,
                branch_name TEXT,
                sales_person_name TEXT,
                invoice_status TEXT DEFAULT 'Open',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        if USE_POSTGRES:
            cursor.execute(f"CREATE OR REPLACE VIEW {PROFIT_VIEW} AS {PROFIT_VIEW_SELECT}")
        else:
            cursor.execute(f"CREATE VIEW IF NOT EXISTS {PROFIT_VIEW} AS {PROFIT_VIEW_SELECT}")

    logger.info("Database initialized (%s)", "PostgreSQL" if USE_POSTGRES else "SQLite")


def install_optimized_objects():
    """Create the indexed view used by server-side pagination."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_sales_lines_date_branch
            ON sales_invoice_lines (inv_date, branch_name)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_sales_lines_order
            ON sales_invoice_lines (inv_date, inv_no, line_id)
        """)
        if USE_POSTGRES:
            cursor.execute(f"CREATE OR REPLACE VIEW {OPTIMIZED_VIEW} AS SELECT * FROM {PROFIT_VIEW}")
        else:
            cursor.execute(f"CREATE VIEW IF NOT EXISTS {OPTIMIZED_VIEW} AS SELECT * FROM {PROFIT_VIEW}")
    logger.info("Optimized pagination view installed")


def drop_optimized_objects():
    """Remove the optimized view; pagination falls back to the client side."""
    with get_db() as conn:
        conn.execute(f"DROP VIEW IF EXISTS {OPTIMIZED_VIEW}")
    logger.info("Optimized pagination view dropped")


def insert_invoice_lines(lines) -> int:
    """Insert invoice lines given as dicts. Returns the number inserted."""
    rows = [
        (
            line['inv_no'], str(line['inv_date']), line['item'],
            line.get('qty', 0), line.get('sale_price', 0), line.get('cost', 0),
            line.get('customer_name'), line.get('branch_name'),
            line.get('sales_person_name'), line.get('invoice_status', 'Open'),
        )
        for line in lines
    ]
    if not rows:
        return 0
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.executemany(
            """INSERT INTO sales_invoice_lines
               (inv_no, inv_date, item, qty, sale_price, cost,
                customer_name, branch_name, sales_person_name, invoice_status)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            rows,
        )
    return len(rows)


def reset_database():
    """Drop every object and recreate the schema. USE WITH CAUTION!"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"DROP VIEW IF EXISTS {OPTIMIZED_VIEW}")
        cursor.execute(f"DROP VIEW IF EXISTS {PROFIT_VIEW}")
        cursor.execute("DROP TABLE IF EXISTS sales_invoice_lines")
    init_database()
    print("Database reset complete!")
