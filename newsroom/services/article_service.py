"""
Article service — business logic for the Article aggregate.

Design notes
------------
- Public reads (list and detail) go through the cache-aside layer.  Cache
  keys encode every dimension that affects the result.
- Update and delete always load the article straight from the database and
  hand it to ``ARTICLE_POLICY``; the cache is never consulted for who owns
  an article.  Only the author may mutate it, publishers included.
- Service functions flush but do not commit; the transaction boundary is
  owned by the router layer.  Mutations therefore leave cache
  invalidation to the router, which commits first and then calls
  ``cache.invalidate_article``, so a concurrent read cannot refill the
  cache with the pre-commit row.
"""
import logging
import math

from sqlalchemy import asc, delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from newsroom.auth.ownership import ARTICLE_POLICY
from newsroom.auth.tokens import Principal
from newsroom.cache import article_detail_key, article_list_key, cache
from newsroom.config import settings
from newsroom.exceptions import NotFoundError
from newsroom.models import Article, Bookmark, Comment
from newsroom.schemas import ArticleCreate, ArticleUpdate, PaginatedResponse

logger = logging.getLogger(__name__)

# Columns that are safe to sort by; guards against arbitrary attribute access.
_SORTABLE_COLUMNS: frozenset[str] = frozenset({"created_at", "title", "category"})


def _resolve_sort_column(sort_by: str):
    if sort_by in _SORTABLE_COLUMNS:
        return getattr(Article, sort_by)
    return Article.created_at


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def article_to_dict(article: Article) -> dict:
    """Serialise an Article ORM instance to a plain dict (list view)."""
    return {
        "id": article.id,
        "title": article.title,
        "category": article.category,
        "created_at": article.created_at.isoformat() if article.created_at else None,
        "author_id": article.author_id,
        "author_name": article.author.username if article.author else None,
    }


def _article_detail_to_dict(article: Article) -> dict:
    data = article_to_dict(article)
    data["content"] = article.content
    data["updated_at"] = article.updated_at.isoformat() if article.updated_at else None
    return data


async def _load_article(db: AsyncSession, article_id: int) -> Article | None:
    """Fetch the current row for *article_id* with its author, bypassing stale identity state."""
    q = (
        select(Article)
        .where(Article.id == article_id)
        .options(joinedload(Article.author))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    return result.unique().scalar_one_or_none()


async def ensure_article_exists(db: AsyncSession, article_id: int) -> None:
    found = await db.scalar(select(Article.id).where(Article.id == article_id))
    if found is None:
        raise NotFoundError("article", article_id)


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def get_articles(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    category: str | None = None,
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> PaginatedResponse:
    """
    Return one page of articles, optionally narrowed to a *category* and a
    case-insensitive *search* over title and content.
    """
    cache_key = article_list_key(page, page_size, category, search, sort_by, sort_order)
    cached = await cache.get(cache_key)
    if cached:
        return PaginatedResponse(**cached)

    filters = []
    if category:
        filters.append(Article.category == category)
    if search:
        filters.append(
            or_(
                Article.title.icontains(search, autoescape=True),
                Article.content.icontains(search, autoescape=True),
            )
        )

    count_q = select(func.count()).select_from(Article).where(*filters)
    total: int = (await db.execute(count_q)).scalar_one()

    sort_col = _resolve_sort_column(sort_by)
    order_expr = desc(sort_col) if sort_order == "desc" else asc(sort_col)
    articles_q = (
        select(Article)
        .where(*filters)
        .options(joinedload(Article.author))
        .order_by(order_expr, desc(Article.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(articles_q)
    articles = result.unique().scalars().all()

    response = PaginatedResponse(
        items=[article_to_dict(a) for a in articles],
        total=total,
        page=page,
        page_size=page_size,
        pages=math.ceil(total / page_size) if total > 0 else 0,
    )
    await cache.set(cache_key, response.model_dump(), ttl=settings.CACHE_TTL_LIST)
    return response


async def get_article(db: AsyncSession, article_id: int) -> dict:
    """Return the detail dict for *article_id*; raises ``NotFoundError`` when absent."""
    cache_key = article_detail_key(article_id)
    cached = await cache.get(cache_key)
    if cached:
        return cached

    article = await _load_article(db, article_id)
    if article is None:
        raise NotFoundError("article", article_id)

    data = _article_detail_to_dict(article)
    await cache.set(cache_key, data, ttl=settings.CACHE_TTL_DETAIL)
    return data


async def create_article(db: AsyncSession, principal: Principal, data: ArticleCreate) -> dict:
    """Create an article authored by *principal*."""
    article = Article(
        title=data.title,
        content=data.content,
        category=data.category,
        author_id=principal.id,
    )
    db.add(article)
    await db.flush()

    created = await _load_article(db, article.id)
    logger.info("article.created id=%s category=%s", created.id, created.category)
    return _article_detail_to_dict(created)


async def update_article(
    db: AsyncSession, principal: Principal, article_id: int, data: ArticleUpdate
) -> dict:
    """
    Partially update an article the caller authored.

    Raises ``NotFoundError`` when the article does not exist and
    ``ForbiddenError`` when it belongs to someone else.
    """
    article = await _load_article(db, article_id)
    ARTICLE_POLICY.enforce(principal, article)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(article, field, value)

    await db.flush()
    await db.refresh(article, ["updated_at"])
    return _article_detail_to_dict(article)


async def delete_article(db: AsyncSession, principal: Principal, article_id: int) -> dict:
    """
    Delete an article the caller authored, along with its comments and
    bookmarks.
    """
    article = await _load_article(db, article_id)
    ARTICLE_POLICY.enforce(principal, article)

    await db.execute(delete(Comment).where(Comment.article_id == article_id))
    await db.execute(delete(Bookmark).where(Bookmark.article_id == article_id))
    await db.delete(article)
    await db.flush()
    logger.info("article.deleted id=%s", article_id)
    return {"id": article_id}
