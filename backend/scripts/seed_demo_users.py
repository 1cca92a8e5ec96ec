#!/usr/bin/env python3
"""
Seed the default categories plus a demo admin and student account.

Usage (from the backend directory, after `alembic upgrade head`):
  python scripts/seed_demo_users.py

Accounts created when missing:
  admin@campusvoice.edu / admin123
  student@campusvoice.edu / student123
"""
import asyncio
import os
import sys

# make campus_voice importable when run from a source checkout
_backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

from sqlalchemy import select  # noqa: E402

from campus_voice.core.security import hash_password  # noqa: E402
from campus_voice.database import async_session_factory, engine  # noqa: E402
from campus_voice.models.user import User, UserRole  # noqa: E402
from campus_voice.services.category import CategoryService  # noqa: E402

DEMO_USERS = [
    {
        "first_name": "System",
        "last_name": "Administrator",
        "email": "admin@campusvoice.edu",
        "password": "admin123",
        "role": UserRole.ADMIN,
    },
    {
        "first_name": "John",
        "last_name": "Doe",
        "email": "student@campusvoice.edu",
        "password": "student123",
        "role": UserRole.STUDENT,
        "department": "Computer Science",
        "year_of_study": 3,
    },
]


async def seed() -> None:
    async with async_session_factory() as session:
        added = await CategoryService.seed_defaults(session)
        print(f"  categories added: {added}")

        for account in DEMO_USERS:
            account = dict(account)
            result = await session.execute(select(User).where(User.email == account["email"]))
            if result.scalar_one_or_none() is not None:
                print(f"  {account['email']} already exists, skipped")
                continue
            password = account.pop("password")
            session.add(
                User(
                    password_hash=hash_password(password),
                    email_verified=True,
                    **account,
                )
            )
            print(f"  created {account['email']} ({account['role'].value})")
        await session.commit()
    await engine.dispose()


def main() -> None:
    print("\n  Campus Voice - seeding demo data")
    asyncio.run(seed())
    print("  done\n")


if __name__ == "__main__":
    main()
