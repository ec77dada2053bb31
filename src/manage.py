"""Bakery back office database management CLI.

Creates and drops the SQL schema for the bakery domain. Only SQL-backed
providers are touched; the in-memory default has nothing to create.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from bakery.domain import bakery
    from bakery.utils.db import setup_db

    print("Initializing bakery domain...")
    bakery.init()
    print("Creating database schema...")
    providers = setup_db(bakery)
    print(f"  Schema ready for providers: {', '.join(providers) or 'none (no SQL provider configured)'}")
    print("Done.")


def drop_database():
    from bakery.domain import bakery
    from bakery.utils.db import drop_db

    print("Initializing bakery domain...")
    bakery.init()
    print("Dropping database schema...")
    providers = drop_db(bakery)
    print(f"  Schema dropped for providers: {', '.join(providers) or 'none (no SQL provider configured)'}")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Bakery back office database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
