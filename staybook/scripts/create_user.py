"""
Create a user with explicit roles (e.g. the first admin). Run from project root:
  python -m staybook.scripts.create_user USERNAME PASSWORD EMAIL [--role ROLE ...]
Example:
  python -m staybook.scripts.create_user admin your-secure-password admin@example.com --role ADMIN
"""
import argparse
import logging
import sys

from staybook.core.config import get_settings
from staybook.core.database import SessionLocal
from staybook.core.logging import configure_logging
from staybook.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
)
from staybook.models import Role, User
from staybook.models.role import DEFAULT_ROLES, GUEST

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Staybook user with the given roles.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        choices=list(DEFAULT_ROLES),
        help="Role to assign (repeatable; default GUEST)",
    )
    args = parser.parse_args()
    configure_logging(get_settings().LOG_LEVEL)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    role_names = sorted(set(args.roles or [GUEST]))

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == username).first()
        if existing:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        roles = db.query(Role).filter(Role.name.in_(role_names)).all()
        missing = set(role_names) - {r.name for r in roles}
        if missing:
            print(
                f"Roles not found: {', '.join(sorted(missing))}. Run 'alembic upgrade head' first.",
                file=sys.stderr,
            )
            return 1
        user = User(
            username=username,
            password_hash=hash_password(args.password),
            email=args.email.strip(),
            thumbnail_url=get_settings().DEFAULT_THUMBNAIL_URL,
            roles=roles,
        )
        db.add(user)
        db.commit()
        logger.info("Created user '%s' with roles %s", username, ", ".join(role_names))
        print(f"Created user '{username}' with roles {', '.join(role_names)}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
