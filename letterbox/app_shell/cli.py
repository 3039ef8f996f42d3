import argparse
import getpass
import logging
import sys
from pathlib import Path
from uuid import uuid4

from letterbox.adapters.auth.crypto import Argon2PasswordHasher
from letterbox.adapters.sqlite_db import SQLiteSubscriptionStore, init_schema
from letterbox.config.loader import load_config
from letterbox.config.models import AppConfig
from letterbox.core.entities import StoredCredential, SubscriptionStatus

logger = logging.getLogger("cli")


def handle_init_db(config: AppConfig, args: argparse.Namespace) -> int:
    init_schema(config.database.path)
    print(f"Schema ready at {config.database.path}")
    return 0


def handle_add_operator(config: AppConfig, args: argparse.Namespace) -> int:
    password = args.password
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            logger.error("Passwords do not match.")
            return 1
    if not password:
        logger.error("Password must not be empty.")
        return 1

    init_schema(config.database.path)
    store = SQLiteSubscriptionStore(config.database.path)
    hasher = Argon2PasswordHasher()

    existing = store.get_operator_credential(args.username)
    credential = StoredCredential(
        user_id=existing.user_id if existing else uuid4(),
        username=args.username,
        password_hash=hasher.hash_password(password),
    )
    store.save_operator_credential(credential)
    action = "Updated" if existing else "Created"
    print(f"{action} operator '{args.username}'.")
    return 0


def handle_list_confirmed(config: AppConfig, args: argparse.Namespace) -> int:
    store = SQLiteSubscriptionStore(
        config.database.path, page_size=config.newsletter.page_size
    )
    for recipient in store.list_confirmed():
        print(f"{recipient.email}\t{recipient.name}")
    pending = store.count_by_status(SubscriptionStatus.PENDING_CONFIRMATION)
    confirmed = store.count_by_status(SubscriptionStatus.CONFIRMED)
    print(f"{confirmed} confirmed, {pending} pending", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="letterbox", description="letterbox operator CLI")
    parser.add_argument("--config", type=Path, help="Path to letterbox.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the database schema")

    op_parser = subparsers.add_parser("add-operator", help="Create or reset an operator login")
    op_parser.add_argument("username")
    op_parser.add_argument("--password", help="Password (prompted when omitted)")

    subparsers.add_parser("list-confirmed", help="Print confirmed subscribers")
    return parser


HANDLERS = {
    "init-db": handle_init_db,
    "add-operator": handle_add_operator,
    "list-confirmed": handle_list_confirmed,
}


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    return HANDLERS[args.command](config, args)


if __name__ == "__main__":
    sys.exit(main())
