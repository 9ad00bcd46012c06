from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.auth.gates import get_current_principal
from newsroom.auth.tokens import Principal
from newsroom.database import get_db
from newsroom.schemas import BookmarkResponse, BookmarkState, ErrorResponse
from newsroom.services import bookmark_service

# Every route here is scoped to the caller; no ownership check is needed
# because a principal can only ever address their own bookmarks.
router = APIRouter(
    prefix="/api/v1/bookmarks",
    tags=["bookmarks"],
    responses={401: {"model": ErrorResponse}},
)


@router.get("", response_model=list[BookmarkResponse])
async def list_bookmarks(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await bookmark_service.list_bookmarks(db, principal.id)


@router.get("/check/{article_id}", response_model=BookmarkState)
async def check_bookmark(
    article_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await bookmark_service.is_bookmarked(db, principal.id, article_id)


@router.post("/{article_id}", response_model=BookmarkState, responses={404: {"model": ErrorResponse}})
async def toggle_bookmark(
    article_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await bookmark_service.toggle_bookmark(db, principal.id, article_id)
