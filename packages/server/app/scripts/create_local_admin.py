"""
Script to create a platform admin for local testing and print a session token.

    python -m app.scripts.create_local_admin --email admin@earthcare.local
"""

import argparse
import asyncio

from sqlmodel import select

from app.core.auth import create_jwt
from app.core.database import session_scope
from app.models.user import User
from earthcare_shared.schemas.common import UserRole


async def create_admin(email: str, first_name: str, last_name: str) -> None:
    async with session_scope() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if not user:
            user = User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                role=UserRole.ADMIN.value,
            )
            session.add(user)
            print(f"Created admin: {email}")
        elif user.role != UserRole.ADMIN.value:
            user.role = UserRole.ADMIN.value
            session.add(user)
            print(f"Promoted {email} to admin.")
        else:
            print(f"Admin {email} already exists.")

        await session.flush()
        user_id = user.id

    token, _ = create_jwt(user_id)
    print(f"Bearer token:\n{token}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a local platform admin.")
    parser.add_argument("--email", required=True, help="Email address for the admin")
    parser.add_argument("--first-name", default="Local")
    parser.add_argument("--last-name", default="Admin")

    args = parser.parse_args()

    asyncio.run(create_admin(args.email, args.first_name, args.last_name))
