"""
Create a user without going through the API (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [--name NAME] [--role user|admin]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password --role admin
"""
import argparse
import re
import sys

from app.core.database import SessionLocal
from app.core.security import get_password_hasher, get_token_service
from app.models.user import Role
from app.schemas.auth import EMAIL_PATTERN
from app.services.auth import AuthService
from app.services.errors import ServiceError
from app.services.notifications import get_reset_link_sender
from app.services.user_store import UserStore


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a user account.")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("--name", default=None, help="Display name (defaults to username)")
    parser.add_argument(
        "--role", default=Role.USER.value, choices=[r.value for r in Role]
    )
    args = parser.parse_args()

    username = args.username.strip()
    if not username or len(username) > 255:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if len(args.password) < 6 or len(args.password) > 128:
        print("Password must be 6-128 characters.", file=sys.stderr)
        return 1
    email = args.email.strip()
    if len(email) > 255 or not re.fullmatch(EMAIL_PATTERN, email):
        print("Invalid email address.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        service = AuthService(
            store=UserStore(db),
            hasher=get_password_hasher(),
            tokens=get_token_service(),
            sender=get_reset_link_sender(),
        )
        try:
            user = service.register(
                username=username,
                name=args.name or username,
                password=args.password,
                email=email,
                role=Role(args.role),
            )
        except ServiceError as e:
            print(e.message, file=sys.stderr)
            return 1
        print(f"Created user '{user.username}' (id={user.id}) with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
