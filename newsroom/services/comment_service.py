"""
Comment service — reader discussion under an article.

Anyone may read comments; any authenticated principal may add one.
Deletion goes through ``COMMENT_POLICY``, which, unlike the article
policy, lets a publisher remove comments written by others.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from newsroom.auth.ownership import COMMENT_POLICY
from newsroom.auth.tokens import Principal
from newsroom.models import Comment
from newsroom.schemas import CommentCreate
from newsroom.services.article_service import ensure_article_exists


def _comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "text": comment.text,
        "article_id": comment.article_id,
        "author_id": comment.author_id,
        "author_name": comment.author.username if comment.author else None,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
    }


async def get_comments(db: AsyncSession, article_id: int) -> list[dict]:
    """Return the comments on *article_id*, newest first."""
    q = (
        select(Comment)
        .where(Comment.article_id == article_id)
        .options(joinedload(Comment.author))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    result = await db.execute(q)
    return [_comment_to_dict(c) for c in result.unique().scalars().all()]


async def add_comment(
    db: AsyncSession,
    principal: Principal,
    article_id: int,
    data: CommentCreate,
) -> dict:
    """Attach a comment by *principal* to an existing article."""
    await ensure_article_exists(db, article_id)

    comment = Comment(text=data.text, author_id=principal.id, article_id=article_id)
    db.add(comment)
    await db.flush()

    q = (
        select(Comment)
        .where(Comment.id == comment.id)
        .options(joinedload(Comment.author))
        .execution_options(populate_existing=True)
    )
    created = (await db.execute(q)).unique().scalar_one()
    return _comment_to_dict(created)


async def delete_comment(db: AsyncSession, principal: Principal, comment_id: int) -> dict:
    """
    Delete a comment if *principal* wrote it or holds the publisher role.

    Raises ``NotFoundError`` before any ownership check when the comment
    does not exist.
    """
    comment = await db.get(Comment, comment_id, populate_existing=True)
    COMMENT_POLICY.enforce(principal, comment)

    await db.delete(comment)
    await db.flush()
    return {"id": comment_id}
