from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.auth.gates import require_role
from newsroom.auth.tokens import Principal, Role
from newsroom.cache import cache
from newsroom.database import get_db
from newsroom.dependencies import ArticleFilters, PaginationParams
from newsroom.schemas import (
    ArticleCreate,
    ArticleDetail,
    ArticleUpdate,
    DeletedResponse,
    ErrorResponse,
    PaginatedResponse,
)
from newsroom.services import article_service

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])

_AUTH_RESPONSES = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


@router.get("", response_model=PaginatedResponse)
async def list_articles(
    pagination: PaginationParams = Depends(),
    filters: ArticleFilters = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.get_articles(
        db,
        pagination.page,
        pagination.page_size,
        filters.category,
        filters.search,
        pagination.sort_by,
        pagination.sort_order,
    )


@router.get("/{article_id}", response_model=ArticleDetail, responses={404: {"model": ErrorResponse}})
async def get_article(article_id: int, db: AsyncSession = Depends(get_db)):
    return await article_service.get_article(db, article_id)


@router.post("", status_code=201, response_model=ArticleDetail, responses=_AUTH_RESPONSES)
async def create_article(
    data: ArticleCreate,
    principal: Principal = Depends(require_role(Role.PUBLISHER)),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.create_article(db, principal, data)
    await db.commit()
    await cache.invalidate_article()
    return article


@router.put(
    "/{article_id}",
    response_model=ArticleDetail,
    responses={**_AUTH_RESPONSES, 404: {"model": ErrorResponse}},
)
async def update_article(
    article_id: int,
    data: ArticleUpdate,
    principal: Principal = Depends(require_role(Role.PUBLISHER)),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.update_article(db, principal, article_id, data)
    await db.commit()
    await cache.invalidate_article(article_id)
    return article


@router.delete(
    "/{article_id}",
    response_model=DeletedResponse,
    responses={**_AUTH_RESPONSES, 404: {"model": ErrorResponse}},
)
async def delete_article(
    article_id: int,
    principal: Principal = Depends(require_role(Role.PUBLISHER)),
    db: AsyncSession = Depends(get_db),
):
    deleted = await article_service.delete_article(db, principal, article_id)
    await db.commit()
    await cache.invalidate_article(article_id)
    return deleted
