"""Pizzeria database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py seed       # Load the admin account, menu and pantry
"""

import argparse
import sys


def _domain():
    from pizzeria.domain import pizzeria

    pizzeria.init()
    return pizzeria


def setup_database():
    from pizzeria.utils.db import setup_db

    domain = _domain()
    print("Creating pizzeria database schema...")
    touched = setup_db(domain)
    print(f"  schema ready ({', '.join(touched) or 'nothing to create for in-memory providers'}).")


def drop_database():
    from pizzeria.utils.db import drop_db

    domain = _domain()
    print("Dropping pizzeria database schema...")
    dropped = drop_db(domain)
    print(f"  schema dropped ({', '.join(dropped) or 'in-memory providers only'}).")


def seed_database():
    from pizzeria.config import get_settings
    from pizzeria.seed import seed

    domain = _domain()
    with domain.domain_context():
        counts = seed()
    print(f"Seeded {counts['pizzas']} pizzas and {counts['inventory_items']} inventory items.")
    print(f"Admin user: {get_settings().admin_email}")


def main():
    parser = argparse.ArgumentParser(description="Pizzeria database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Load sample data (idempotent)")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
