#!/usr/bin/env python3
"""
Print a bearer token for the store admin account.

The server creates the same account at startup when PACKWELL_SEED_ADMIN is
set; the account id is derived from the email, so the token printed here is
accepted by any server sharing the same PACKWELL_JWT_SECRET.

Usage:
    python scripts/seed_admin.py [--email admin@example.com] [--name "Store Admin"] [--days 7]
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from packwell.core.config import settings  # noqa: E402
from packwell.core.seed import ensure_admin  # noqa: E402
from packwell.security.auth_middleware import issue_token  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Issue a token for the admin account")
    parser.add_argument("--email", default=settings.admin_email)
    parser.add_argument("--name", default=settings.admin_name)
    parser.add_argument("--days", type=int, default=7, help="Token lifetime in days")
    args = parser.parse_args()

    admin = ensure_admin(args.email, args.name)
    token = issue_token(admin, expires_minutes=args.days * 24 * 60)

    print("=" * 60)
    print("Admin account")
    print("=" * 60)
    print(f"  Email: {admin.email}")
    print(f"  ID:    {admin.id}")
    print(f"  Valid: {args.days} day(s)")
    print("\nStart the server with PACKWELL_SEED_ADMIN=true, then send:")
    print(f"\n  Authorization: Bearer {token}\n")

    if settings.jwt_secret == "change-me-in-production":
        print("! Using the default JWT secret; set PACKWELL_JWT_SECRET for real deployments")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
