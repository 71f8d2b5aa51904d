"""
Create an account (e.g. the first admin) without the signup endpoint. Run from project root:
  python -m commons.scripts.create_user EMAIL PASSWORD [role] [--name NAME]
Example:
  python -m commons.scripts.create_user admin@example.org your-secure-password admin
"""
import argparse
import sys

from pydantic import ValidationError

from commons.core.errors import ServiceError
from commons.core.identity import get_identity
from commons.core.store import get_store
from commons.schemas.auth import SignupRequest
from commons.services.users import signup


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Commons account (identity + user record).")
    parser.add_argument("email", help="Account email")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    parser.add_argument("--name", default="", help="Display name")
    args = parser.parse_args(argv)

    try:
        body = SignupRequest(email=args.email, password=args.password, name=args.name)
    except ValidationError as e:
        print(f"Invalid input: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1

    try:
        user = signup(get_store(), get_identity(), body, role=args.role)
    except ServiceError as e:
        print(e.message, file=sys.stderr)
        return 1
    print(f"Created user '{user.email}' ({user.uid}) with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
