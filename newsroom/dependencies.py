from fastapi import Query

from newsroom.config import settings


class PaginationParams:
    """
    Reusable FastAPI dependency that parses and validates pagination /
    sorting query parameters.

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    page_size:
        Number of items per page, clamped to ``settings.MAX_PAGE_SIZE``.
    sort_by:
        Column name to sort by.  The service layer maps unknown names to
        ``created_at``.
    sort_order:
        ``"asc"`` or ``"desc"`` (enforced by the regex pattern).
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)."),
        page_size: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=100,
            description="Number of items returned per page (max 100).",
        ),
        sort_by: str = Query("created_at", description="Column name to sort results by."),
        sort_order: str = Query(
            "desc",
            pattern="^(asc|desc)$",
            description="Sort direction: 'asc' or 'desc'.",
        ),
    ) -> None:
        self.page = page
        self.page_size = min(page_size, settings.MAX_PAGE_SIZE)
        self.sort_by = sort_by
        self.sort_order = sort_order


class ArticleFilters:
    """Category and free-text filters for the public article feed."""

    def __init__(
        self,
        category: str | None = Query(
            None,
            max_length=50,
            description="Only articles in this category; 'All' disables the filter.",
        ),
        search: str | None = Query(
            None,
            max_length=200,
            description="Case-insensitive match against title and content.",
        ),
    ) -> None:
        self.category = None if not category or category == "All" else category
        self.search = search.strip() if search and search.strip() else None
