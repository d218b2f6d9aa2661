"""Utility script to create an administrator profile allowed to read the feeds."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from marketplace_feed.infrastructure.database import SessionLocal, initialize_database
from marketplace_feed.infrastructure.repositories import ADMIN_ROLES, ProfileRepository


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for profile creation."""

    parser = argparse.ArgumentParser(
        description="Create an administrator profile for the marketplace feed API.",
    )
    parser.add_argument("--first-name", default="Admin", help="First name (default: Admin)")
    parser.add_argument("--last-name", default=None, help="Last name (optional)")
    parser.add_argument(
        "--role",
        default="admin",
        choices=sorted(ADMIN_ROLES),
        help="Administrative role to grant (default: admin)",
    )
    return parser.parse_args()


def main() -> None:
    """Create a profile using the provided command line arguments."""

    args = parse_args()
    initialize_database()

    session = SessionLocal()
    try:
        profile_id = ProfileRepository(session).create(
            first_name=args.first_name,
            last_name=args.last_name,
            role=args.role,
        )
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Could not create the profile: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Error saving the profile: {exc}") from exc
    else:
        print(
            "Profile created:\n"
            f"  ID: {profile_id}\n"
            f"  Role: {args.role}\n"
            f"  Use it as the X-Viewer-Id header."
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
