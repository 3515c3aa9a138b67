"""Storefront management CLI.

Creates and drops database schemas and runs one-off maintenance.

Usage:
    python src/manage.py setup-db         # Create all tables
    python src/manage.py drop-db          # Drop all tables
    python src/manage.py backfill-owners  # Attribute ownerless orders to "legacy_user"
"""

import argparse
import sys

from storefront.order.order import LEGACY_OWNER_ID


def setup_database():
    """Create database schemas for every SQL provider."""
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    touched = setup_db(storefront)
    print(f"  Schema ready for: {', '.join(touched) or 'no SQL providers configured'}")
    print("Done.")


def drop_database():
    """Drop database schemas for every SQL provider."""
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    touched = drop_db(storefront)
    print(f"  Schema dropped for: {', '.join(touched) or 'no SQL providers configured'}")
    print("Done.")


def backfill_owners(owner_id=LEGACY_OWNER_ID):
    """Give every order without an owner the placeholder ``owner_id``. Returns the count."""
    from storefront.domain import storefront
    from storefront.order.maintenance import BackfillOrderOwners

    storefront.init()
    with storefront.domain_context():
        updated = storefront.process(BackfillOrderOwners(owner_id=owner_id), asynchronous=False)

    print(f"Updated {updated} order(s) with owner '{owner_id}'.")
    return updated


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    backfill_parser = subparsers.add_parser("backfill-owners", help="Attribute ownerless orders to a placeholder user")
    backfill_parser.add_argument("--owner-id", default=LEGACY_OWNER_ID, help="Owner to assign (default: %(default)s)")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "backfill-owners":
        backfill_owners(args.owner_id)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
