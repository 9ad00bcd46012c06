from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.auth.gates import get_current_principal
from newsroom.auth.tokens import Principal
from newsroom.database import get_db
from newsroom.schemas import CommentCreate, CommentResponse, DeletedResponse, ErrorResponse
from newsroom.services import comment_service

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])


@router.get("/{article_id}", response_model=list[CommentResponse])
async def list_comments(article_id: int, db: AsyncSession = Depends(get_db)):
    return await comment_service.get_comments(db, article_id)


@router.post(
    "/{article_id}",
    status_code=201,
    response_model=CommentResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_comment(
    article_id: int,
    data: CommentCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.add_comment(db, principal, article_id, data)


@router.delete(
    "/{comment_id}",
    response_model=DeletedResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def delete_comment(
    comment_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.delete_comment(db, principal, comment_id)
