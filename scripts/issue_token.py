"""Issue a bearer token for an existing user.

Usage::

    python -m scripts.issue_token 42 --ttl-minutes 30

The user's role is read from the database, so the token always carries
the role the user store currently records.
"""
import argparse
import asyncio
import sys
from datetime import timedelta

from newsroom.auth.tokens import Principal, Role, get_token_codec
from newsroom.database import async_session, engine
from newsroom.models import User


async def issue(user_id: int, ttl_minutes: int | None) -> int:
    async with async_session() as session:
        user = await session.get(User, user_id)
    await engine.dispose()

    if user is None:
        print(f"No user with id {user_id}", file=sys.stderr)
        return 1

    ttl = timedelta(minutes=ttl_minutes) if ttl_minutes else None
    print(get_token_codec().issue(Principal(id=user.id, role=Role(user.role)), ttl=ttl))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Issue a bearer token for a user")
    parser.add_argument("user_id", type=int)
    parser.add_argument("--ttl-minutes", type=int, default=None,
                        help="Token lifetime; defaults to ACCESS_TOKEN_TTL_MINUTES")
    args = parser.parse_args()
    sys.exit(asyncio.run(issue(args.user_id, args.ttl_minutes)))


if __name__ == "__main__":
    main()
