"""Admin account management.

    python -m app.manage create-admin --name Admin --email admin@example.com --password secret --mobile 9999999999
    python -m app.manage make-admin --email someone@example.com
"""

import argparse
import sys

from app.database import SessionLocal, engine, Base
from app.errors import StorefrontError, NotFoundError
from app.models import address, cart, coupon, order, product, user  # noqa: F401
from app.schemas.user import UserRegister
from app.services.user_service import UserService


def cmd_create_admin(args: argparse.Namespace) -> int:
    db = SessionLocal()
    try:
        admin = UserService.register(
            db,
            UserRegister(name=args.name, email=args.email, password=args.password, mobile=args.mobile),
            role="admin",
        )
        print(f"Created admin {admin.email} (id {admin.id})")
        return 0
    finally:
        db.close()


def cmd_make_admin(args: argparse.Namespace) -> int:
    db = SessionLocal()
    try:
        target = UserService.get_by_email(db, args.email)
        if target is None:
            raise NotFoundError("User", args.email)
        UserService.set_role(db, target, "admin")
        print(f"{target.email} is now an admin")
        return 0
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="app.manage", description="Storefront admin tasks")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create-admin", help="Create a new admin account")
    p.add_argument("--name", required=True)
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    p.add_argument("--mobile", required=True)
    p.set_defaults(func=cmd_create_admin)

    p = sub.add_parser("make-admin", help="Promote an existing user to admin")
    p.add_argument("--email", required=True)
    p.set_defaults(func=cmd_make_admin)

    args = parser.parse_args(argv)
    Base.metadata.create_all(bind=engine)
    try:
        return args.func(args)
    except StorefrontError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
