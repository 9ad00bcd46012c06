"""
Bookmark service — the toggle engine plus the caller's bookmark reads.

``toggle_bookmark`` is a flip, not an upsert: each call inverts the state
for the (user, article) pair.  The read-then-write is not locked in
process.  Two concurrent toggles can both see "absent" and both insert;
the (user_id, article_id) primary key makes the database reject the
second insert.  The loser rolls back its savepoint, re-reads once and
reports what it finds, so both callers end up agreeing on
``bookmarked=True`` and exactly one row exists.  If the re-read still
finds no row, the collision is a genuine fault and ``ToggleConflictError``
propagates.  Any other integrity failure (a foreign key, for instance) is
not a toggle race and is re-raised untouched.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from newsroom.auth.gates import safe_log_identifier
from newsroom.exceptions import ToggleConflictError
from newsroom.models import Article, Bookmark
from newsroom.services.article_service import article_to_dict, ensure_article_exists

logger = logging.getLogger(__name__)

# SQLSTATE unique_violation; the bookmarks primary key is the table's only
# unique constraint.
_UNIQUE_VIOLATION = "23505"


def _is_duplicate_bookmark(exc: IntegrityError) -> bool:
    """True when *exc* is the (user_id, article_id) key rejecting a second row."""
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == _UNIQUE_VIOLATION
    # SQLite reports constraint failures by message only.
    return "UNIQUE constraint failed" in str(exc.orig)


async def _find_bookmark(db: AsyncSession, user_id: int, article_id: int) -> Bookmark | None:
    q = (
        select(Bookmark)
        .where(Bookmark.user_id == user_id, Bookmark.article_id == article_id)
        .execution_options(populate_existing=True)
    )
    return (await db.execute(q)).scalar_one_or_none()


async def toggle_bookmark(db: AsyncSession, user_id: int, article_id: int) -> dict:
    """
    Flip the bookmark for (*user_id*, *article_id*) and return the new
    state as ``{"bookmarked": bool}``.

    Raises ``NotFoundError`` when the article does not exist.
    """
    await ensure_article_exists(db, article_id)

    existing = await _find_bookmark(db, user_id, article_id)
    if existing is not None:
        await db.delete(existing)
        await db.flush()
        return {"bookmarked": False}

    try:
        async with db.begin_nested():
            db.add(Bookmark(user_id=user_id, article_id=article_id))
    except IntegrityError as exc:
        if not _is_duplicate_bookmark(exc):
            raise
        logger.info(
            "bookmark.toggle_conflict user=%s article=%s, re-reading",
            safe_log_identifier(user_id, prefix="pid"),
            article_id,
        )
    else:
        return {"bookmarked": True}

    # Single retry: report whatever the concurrent toggle left behind.
    if await _find_bookmark(db, user_id, article_id) is None:
        raise ToggleConflictError(user_id, article_id)
    return {"bookmarked": True}


async def is_bookmarked(db: AsyncSession, user_id: int, article_id: int) -> dict:
    return {"bookmarked": await _find_bookmark(db, user_id, article_id) is not None}


async def list_bookmarks(db: AsyncSession, user_id: int) -> list[dict]:
    """Return the caller's bookmarks, most recent first, each with its article summary."""
    q = (
        select(Bookmark)
        .where(Bookmark.user_id == user_id)
        .options(joinedload(Bookmark.article).joinedload(Article.author))
        .order_by(Bookmark.created_at.desc(), Bookmark.article_id.desc())
    )
    result = await db.execute(q)
    return [
        {
            "article_id": b.article_id,
            "created_at": b.created_at.isoformat() if b.created_at else None,
            "article": article_to_dict(b.article),
        }
        for b in result.unique().scalars().all()
    ]
