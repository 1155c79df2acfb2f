#!/usr/bin/env python3
"""
Reset a user's password in the Homeboard SQLite database.

This script does not read or reveal any existing password.  It sets a
new PBKDF2-HMAC-SHA256 hash ("salthex$hashhex") for the given user
name, using the same hashing helper as the API.

Usage:
    python reset_password.py --db ./homeboard.db --name admin --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import os
import sqlite3
import sys

from homeboard_api.app.core.security import hash_password


def main():
    ap = argparse.ArgumentParser(description="Reset a Homeboard user password (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./homeboard.db)")
    ap.add_argument("--name", required=True, help="User name to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args()

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        sys.exit(1)

    conn = sqlite3.connect(args.db)
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE name = ?", (args.name,))
        if not cur.fetchone():
            print(f"[!] No user found with name: {args.name}", file=sys.stderr)
            sys.exit(2)

        cur.execute("UPDATE users SET password = ? WHERE name = ?", (hash_password(new_password), args.name))
        conn.commit()
        print(f"[+] Password updated for user: {args.name}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
