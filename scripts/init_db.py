"""
Database initialization script.
Creates the invoice line table and profit views, optionally the optimized
pagination view, and optionally seeds sample data.

Usage:
    python scripts/init_db.py [--reset] [--optimized] [--seed N]
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse

from bizdash.database import USE_POSTGRES, init_database, install_optimized_objects, reset_database


def main(argv=None):
    parser = argparse.ArgumentParser(description="Initialize the Business Dashboard database")
    parser.add_argument("--reset", action="store_true", help="drop and recreate all objects")
    parser.add_argument("--optimized", action="store_true",
                        help="install the optimized view used for server-side pagination")
    parser.add_argument("--seed", type=int, default=0, metavar="N",
                        help="insert N sample invoices")
    args = parser.parse_args(argv)

    print("=" * 60, flush=True)
    print("Business Dashboard - Database Initialization", flush=True)
    print(f"Database: {'PostgreSQL' if USE_POSTGRES else 'SQLite'}", flush=True)
    print("=" * 60, flush=True)

    print("\nStep 1: Creating tables and views...")
    print("-" * 40)
    if args.reset:
        reset_database()
    else:
        init_database()

    if args.optimized:
        print("\nStep 2: Installing optimized pagination view...")
        print("-" * 40)
        install_optimized_objects()
    else:
        print("\nStep 2: Skipped optimized view (pagination will run client-side)")

    if args.seed:
        print(f"\nStep 3: Generating {args.seed} sample invoices...")
        print("-" * 40)
        from scripts.generate_dummy_data import generate_dummy_data
        generate_dummy_data(args.seed)

    print("\n" + "=" * 60)
    print("Database initialization complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
