"""Command-line entry point for maintenance tasks.

Usage:
    python main.py init-db       Create any missing tables.
    python main.py seed-demo     Create the demo school and demo accounts.
    python main.py create-admin  Create an admin account interactively.
"""

import argparse
import getpass
import logging
import sys

from core.logging_config import setup_logging
from core.database import SessionLocal, init_db
from core.exceptions import UserAlreadyExistsError
from utils.demo_seed import seed_demo_data
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


def _create_admin() -> int:
    email = input("Email: ").strip()
    first_name = input("First name: ").strip()
    last_name = input("Last name: ").strip()
    password = getpass.getpass("Password: ")
    if not (email and first_name and last_name and password):
        print("All fields are required.")
        return 1

    db = SessionLocal()
    try:
        user = UserManager(db).create_user(
            email=email,
            password=password,
            role="admin",
            first_name=first_name,
            last_name=last_name,
        )
    except UserAlreadyExistsError as e:
        print(e)
        return 1
    finally:
        db.close()
    print(f"Created admin {user.email} ({user.user_id})")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="SchoolHub maintenance tasks")
    parser.add_argument("command", choices=["init-db", "seed-demo", "create-admin"])
    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "init-db":
        init_db()
        logger.info("Database schema is up to date")
        return 0

    if args.command == "seed-demo":
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()
        return 0

    return _create_admin()


if __name__ == "__main__":
    sys.exit(main())
