#!/usr/bin/env python3
"""Quick look at the portal database contents."""

import os
import sys

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from portal.config import settings
from portal.database import create_database

db = create_database(sys.argv[1] if len(sys.argv) > 1 else settings.DATABASE_URL)

print("=" * 60)
print(f"DATABASE CONTENTS ({db.backend})")
print("=" * 60)

for table in ("users", "admin_users", "products", "shipping_addresses", "orders", "sessions"):
    row = db.query_one(f"SELECT COUNT(*) AS total FROM {table}")
    print(f"  {table:<20} {row['total'] if row else 0}")

print("\nPRODUCTS:")
products = db.query_all("SELECT * FROM products ORDER BY id")
if products:
    for product in products:
        state = "active" if product["is_active"] else "inactive"
        print(f"  - #{product['id']} {product['name']} ({product['flavor'] or '-'})")
        print(f"    Price: {product['price']}  min {product['min_quantity']} / step {product['quantity_step']}  {state}")
else:
    print("  No products")

print("\nLATEST ORDERS:")
orders = db.query_all(
    "SELECT o.*, u.company_name FROM orders o LEFT JOIN users u ON o.user_id = u.id "
    "ORDER BY o.created_at DESC, o.id DESC LIMIT 10"
)
if orders:
    for order in orders:
        paid = "paid" if order["payment_confirmed"] else "unpaid"
        print(f"  - #{order['id']} {order['created_at']} {order['company_name'] or 'Unknown'}")
        print(f"    {order['quantity']} x {order['unit_price']} = {order['total_price']}  [{order['status']}, {paid}]")
else:
    print("  No orders")

db.dispose()
print("\n" + "=" * 60)
