#!/usr/bin/env python3
"""
Script to create an admin account, or promote an existing one.

Admin rights are never granted through the REST API.

Usage:
    python scripts/create_admin.py
    python scripts/create_admin.py --promote someone@example.com
"""
import argparse
import getpass
import sys
from pathlib import Path

# Add parent directory to the system path
sys.path.insert(0, str(Path(__file__).parent.parent))

from database.connection import Database
from services.auth_service import AuthService
import config


def init_db():
    config.db = Database(
        database_url=config.DATABASE_URL,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW
    )
    config.db.create_tables()


def promote(email: str):
    """Grant admin rights to an existing account."""
    with config.db.get_session() as db:
        user = AuthService.get_user_by_email(db, email)
        if user is None:
            print(f"\n✗ Error: no account with email {email}")
            sys.exit(1)
        user.is_admin = True
        print(f"\n✓ {user.full_name} <{user.email}> is now an admin")


def create_admin():
    """Create an admin account from interactive input."""
    print("Creating admin account...")
    print("=" * 50)

    full_name = input("Full name: ").strip()
    email = input("Email: ").strip()
    phone = input("Phone (optional): ").strip() or None
    password = getpass.getpass("Password: ")

    if not full_name or not email or not password:
        print("Error: Full name, email and password are required")
        sys.exit(1)

    try:
        with config.db.get_session() as db:
            user = AuthService.create_user(
                db=db,
                full_name=full_name,
                email=email,
                password=password,
                phone=phone,
                is_admin=True
            )
            print(f"\n✓ Admin account created successfully!")
            print(f"  Name: {user.full_name}")
            print(f"  Email: {user.email}")
    except ValueError as e:
        print(f"\n✗ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--promote", metavar="EMAIL", help="grant admin rights to an existing account")
    args = parser.parse_args()

    init_db()
    if args.promote:
        promote(args.promote)
    else:
        create_admin()
