"""
Script to generate dummy sales invoice lines for local development.
Invoices span the last 120 days across a handful of branches, each with one
to five item lines priced with a 10-40% margin.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import random
from datetime import date, timedelta

from bizdash.database import init_database, insert_invoice_lines

BRANCHES = ['Main Branch', 'North Branch', 'South Branch', 'East Branch', 'Frozen Warehouse']

ITEMS = {
    'SKY FLAKES CHEESE 20X10X25GM': 42.0,
    'BISKREM CHOCOLATE 10X24': 55.5,
    'OREO COOKIES 12X137G': 38.25,
    'MILK POWDER 400G': 19.9,
    'RICE 5KG BAG': 27.0,
    'SUNFLOWER OIL 1.8L': 16.75,
}

CUSTOMERS = ['Al Noor Trading', 'Green Valley Market', 'City Hypermarket', 'Desert Rose Grocery',
             'Family Mart', 'Cash Customer']

SALES_PEOPLE = ['COUNTER SALES', 'Ahmed Saleh', 'Fatima Khan', 'Omar Rashid']


def make_invoice_lines(invoice_count, days=120, seed=None, today=None):
    """Build invoice line dicts without touching the database."""
    rng = random.Random(seed)
    today = today or date.today()
    lines = []
    for n in range(1, invoice_count + 1):
        inv_no = f"INV-{n:05d}"
        inv_date = today - timedelta(days=rng.randrange(days))
        branch = rng.choice(BRANCHES)
        customer = rng.choice(CUSTOMERS)
        sales_person = rng.choice(SALES_PEOPLE)
        status = 'Closed' if rng.random() < 0.1 else 'Open'
        for item in rng.sample(sorted(ITEMS), rng.randint(1, 5)):
            qty = rng.randint(1, 12)
            unit_price = ITEMS[item]
            unit_cost = unit_price * (1 - rng.uniform(0.10, 0.40))
            lines.append({
                'inv_no': inv_no,
                'inv_date': inv_date.isoformat(),
                'item': item,
                'qty': qty,
                'sale_price': round(unit_price * qty, 2),
                'cost': round(unit_cost * qty, 2),
                'customer_name': customer,
                'branch_name': branch,
                'sales_person_name': sales_person,
                'invoice_status': status,
            })
    return lines


def generate_dummy_data(invoice_count=500, seed=None):
    """Insert `invoice_count` random invoices."""
    init_database()
    lines = make_invoice_lines(invoice_count, seed=seed)
    inserted = insert_invoice_lines(lines)
    print(f"  Created {invoice_count} invoices ({inserted} lines)")
    return inserted


if __name__ == "__main__":
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 500
    generate_dummy_data(count)
