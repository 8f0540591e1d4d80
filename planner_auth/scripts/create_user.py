"""
Create an already activated account (e.g. first admin). Run from project root:
  python -m planner_auth.scripts.create_user USERNAME EMAIL PASSWORD [ROLE ...]
Example:
  python -m planner_auth.scripts.create_user admin admin@example.com your-secure-password USER ADMIN
"""
import argparse
import logging
import sys
import uuid

from planner_auth.core.database import SessionLocal
from planner_auth.core.security import hash_password
from planner_auth.models import Activity, Role, User
from planner_auth.schemas.auth import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from planner_auth.services.accounts import DEFAULT_ROLE, account_exists

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Create an activated Planner account (bypasses email activation)."
    )
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("roles", nargs="*", default=[DEFAULT_ROLE], help="Role names (must exist)")
    args = parser.parse_args()

    username = args.username.strip()
    email = args.email.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        if account_exists(db, username, email):
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        roles = db.query(Role).filter(Role.name.in_(args.roles)).all()
        missing = set(args.roles) - {role.name for role in roles}
        if missing:
            print(f"Unknown role(s): {', '.join(sorted(missing))}", file=sys.stderr)
            return 1
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(args.password),
            roles=roles,
        )
        db.add(user)
        db.add(Activity(user=user, uuid=str(uuid.uuid4()), activated=True))
        db.commit()
        logger.info("Created account id=%s with roles %s", user.id, ", ".join(user.role_names))
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
