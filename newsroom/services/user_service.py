"""
User service — the minimal user store behind principal ids.

Credentials are not handled here; a user's id and role are what the
token codec embeds.  Username and email uniqueness is enforced by the
database and translated into 409 by the router.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from newsroom.exceptions import NotFoundError
from newsroom.models import User
from newsroom.schemas import UserCreate


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def get_users(db: AsyncSession) -> list[dict]:
    q = select(User).order_by(User.created_at.desc(), User.id.desc())
    result = await db.execute(q)
    return [_user_to_dict(u) for u in result.scalars().all()]


async def get_user(db: AsyncSession, user_id: int) -> dict:
    """
    Return *user_id* with a summary of the articles they authored.

    ``selectinload`` issues one extra query for the articles instead of one
    per article.
    """
    q = (
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.articles))
    )
    user = (await db.execute(q)).scalar_one_or_none()
    if user is None:
        raise NotFoundError("user", user_id)

    data = _user_to_dict(user)
    data["articles"] = [
        {
            "id": a.id,
            "title": a.title,
            "category": a.category,
            "created_at": a.created_at.isoformat() if a.created_at else None,
            "author_id": a.author_id,
            "author_name": user.username,
        }
        for a in sorted(user.articles, key=lambda a: a.id, reverse=True)
    ]
    return data


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    user = User(username=data.username, email=data.email, role=data.role.value)
    db.add(user)
    await db.flush()
    await db.refresh(user, ["created_at"])
    return _user_to_dict(user)
