"""Page/per_page handling shared by the form and submission listings."""

from dataclasses import dataclass

from fastapi import Query
from sqlalchemy.orm import Query as OrmQuery

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class PaginationParams:
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def get_pagination(
    page: int = Query(DEFAULT_PAGE, ge=1, description="1-based page number"),
    per_page: int = Query(
        DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE, description=f"Page size, at most {MAX_PER_PAGE}"
    ),
) -> PaginationParams:
    """Query-string dependency for list endpoints."""
    return PaginationParams(page=page, per_page=per_page)


def page_count(total: int, pagination: PaginationParams) -> int:
    if pagination.per_page <= 0:
        return 0
    return -(-total // pagination.per_page)


def paginate_query(query: OrmQuery, pagination: PaginationParams) -> tuple[list, int]:
    """Return one page of ``query`` plus the unpaginated row count."""
    total = query.count()
    rows = query.offset(pagination.offset).limit(pagination.per_page).all()
    return rows, total
