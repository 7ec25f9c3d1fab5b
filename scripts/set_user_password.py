#!/usr/bin/env python3
"""
Reset a dashboard user's password.

Usage:
    python scripts/set_user_password.py demo
    python scripts/set_user_password.py demo --password "new-password"
"""

import argparse
import getpass
import os
import sys

import psycopg2
from dotenv import load_dotenv
from passlib.hash import bcrypt

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
    parser = argparse.ArgumentParser(description="Reset a user's password hash")
    parser.add_argument("username", help="User whose password is reset")
    parser.add_argument("--password", "-p", help="New password (will prompt if not provided)")
    args = parser.parse_args()

    password = args.password
    if not password:
        password = getpass.getpass("Enter password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Error: Passwords do not match")
            sys.exit(1)

    conn = get_connection()
    cur = conn.cursor()
    cur.execute(
        "UPDATE users SET password_hash = %s WHERE username = %s",
        (bcrypt.hash(password), args.username),
    )
    if cur.rowcount == 0:
        print(f"Error: user '{args.username}' not found")
        conn.rollback()
        sys.exit(1)

    conn.commit()
    cur.close()
    conn.close()
    print(f"Password updated for '{args.username}'")


if __name__ == "__main__":
    main()
