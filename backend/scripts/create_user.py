"""
Provision a login for an operator. There is no signup endpoint; identities
are created out-of-band with this script.
Run with: python -m scripts.create_user <username> [--password PASSWORD]
"""

import argparse
import asyncio
import getpass
import sys

from pos_checklist.database import engine, async_session, Base
from pos_checklist.services.auth_service import create_user


async def provision(username: str, password: str) -> int:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        async with async_session() as session:
            user = await create_user(session, username, password)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()
    print(f"Created user '{user.username}' (id {user.id}).")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a POS checklist login")
    parser.add_argument("username")
    parser.add_argument(
        "--password",
        help="Password for the new user (prompted for when omitted)",
    )
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    sys.exit(asyncio.run(provision(args.username, password)))
