"""Storefront database management CLI.

Provides commands to create, drop and empty the storefront database schema.
Reuses the setup_db/drop_db/truncate_db utilities in ``storefront.utils.db``.

Usage:
    python src/manage.py setup-db      # Create all tables
    python src/manage.py drop-db       # Drop all tables
    python src/manage.py truncate-db   # Delete all rows, keep tables
"""

import argparse
import sys


def _domain():
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    """Create the database schema for the storefront domain."""
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    """Drop the database schema for the storefront domain."""
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def truncate_database():
    from storefront.utils.db import truncate_db

    domain = _domain()
    print("Removing all storefront data...")
    truncate_db(domain)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("truncate-db", help="Delete all rows from every table")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "truncate-db":
        truncate_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
