#!/usr/bin/env python3
"""
Append a performance snapshot for every portfolio from its current
investment values, outside the scheduled job.

Usage:
    python scripts/record_performance.py
    python scripts/record_performance.py --portfolio-id 3 --dry-run
"""

import argparse
import os
from decimal import Decimal

import psycopg2
from psycopg2.extras import RealDictCursor
from dotenv import load_dotenv

load_dotenv()


def get_connection():
    return psycopg2.connect(
        host=os.getenv('POSTGRES_HOST', 'localhost'),
        port=os.getenv('POSTGRES_PORT', '5432'),
        user=os.getenv('POSTGRES_USER', 'postgres'),
        password=os.getenv('POSTGRES_PASSWORD', ''),
        dbname=os.getenv('POSTGRES_DATABASE', 'portfolio_dashboard'),
    )


def main():
    parser = argparse.ArgumentParser(description="Record portfolio performance snapshots")
    parser.add_argument("--portfolio-id", type=int, help="Only record this portfolio")
    parser.add_argument("--dry-run", action="store_true", help="Print values without writing")
    args = parser.parse_args()

    conn = get_connection()
    cur = conn.cursor(cursor_factory=RealDictCursor)

    print("=" * 60)
    print("Recording portfolio performance")
    print("=" * 60)

    if args.portfolio_id:
        cur.execute("SELECT id, name FROM portfolios WHERE id = %s", (args.portfolio_id,))
    else:
        cur.execute("SELECT id, name FROM portfolios ORDER BY id")
    portfolios = cur.fetchall()

    if not portfolios:
        print("No portfolios found")

    for portfolio in portfolios:
        cur.execute(
            "SELECT shares, current_price FROM investments WHERE portfolio_id = %s",
            (portfolio['id'],),
        )
        total_value = sum(
            (Decimal(row['shares']) * Decimal(row['current_price']) for row in cur.fetchall()),
            Decimal("0"),
        )
        print(f"\n{portfolio['name']} (id={portfolio['id']}): ${total_value:,.2f}")

        if args.dry_run:
            continue

        cur.execute("""
            INSERT INTO performance_snapshots (portfolio_id, timestamp, total_value, created_at)
            VALUES (%s, NOW(), %s, NOW())
            RETURNING id
        """, (portfolio['id'], total_value))
        print(f"  Created snapshot id={cur.fetchone()['id']}")

    if not args.dry_run:
        conn.commit()
    cur.close()
    conn.close()

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
