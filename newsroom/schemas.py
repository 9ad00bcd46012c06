from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from newsroom.auth.tokens import Role


# --- User ---

class UserBase(BaseModel):
    username: str = Field(max_length=50)
    email: str = Field(max_length=255)
    role: Role = Role.READER


class UserCreate(UserBase):
    pass


class UserResponse(UserBase):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UserDetail(UserResponse):
    articles: list["ArticleResponse"] = []


# --- Comment ---

class CommentCreate(BaseModel):
    text: str = Field(min_length=1, max_length=500)


class CommentResponse(BaseModel):
    id: int
    text: str
    article_id: int
    author_id: int
    author_name: str | None = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Article ---

class ArticleBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    category: str = Field("General", max_length=50)


class ArticleCreate(ArticleBase):
    pass


class ArticleUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    category: str | None = Field(None, max_length=50)


class ArticleResponse(BaseModel):
    id: int
    title: str
    category: str
    created_at: datetime
    author_id: int
    author_name: str | None = None
    model_config = ConfigDict(from_attributes=True)


class ArticleDetail(ArticleResponse):
    content: str
    updated_at: datetime | None = None


class DeletedResponse(BaseModel):
    id: int


# --- Bookmark ---

class BookmarkState(BaseModel):
    bookmarked: bool


class BookmarkResponse(BaseModel):
    article_id: int
    created_at: datetime
    article: ArticleResponse


# --- Pagination ---

class PaginatedResponse(BaseModel):
    items: list  # Will be typed in router
    total: int
    page: int
    page_size: int
    pages: int


# --- Errors ---

class ErrorResponse(BaseModel):
    error: str
    message: str


# Required for forward-reference resolution (UserDetail.articles)
UserDetail.model_rebuild()
