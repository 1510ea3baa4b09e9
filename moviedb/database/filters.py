"""
Pagination and sorting parameters for movie searches.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator

from moviedb.database.models import Movie


# Every sortable name maps to a mapped column, never to caller text
SORT_COLUMNS = {
    "id": Movie.id,
    "title": Movie.title,
    "year": Movie.year,
    "runtime": Movie.runtime,
}

SORT_SAFELIST = tuple(SORT_COLUMNS) + tuple(f"-{name}" for name in SORT_COLUMNS)

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100


class Filters(BaseModel):
    """Page, page size and sort key for a search."""

    page: int = Field(1, ge=1, le=MAX_PAGE)
    page_size: int = Field(20, ge=1, le=MAX_PAGE_SIZE)
    sort: str = "id"

    @field_validator("sort")
    @classmethod
    def sort_in_safelist(cls, value: str) -> str:
        if value not in SORT_SAFELIST:
            raise ValueError(f"sort must be one of: {', '.join(SORT_SAFELIST)}")
        return value

    def sort_column(self):
        """Return the mapped column for the sort key."""
        name = self.sort[1:] if self.sort_descending() else self.sort
        # Guards instances built with model_construct(), which skips validation
        if name not in SORT_COLUMNS:
            raise ValueError(f"unsafe sort parameter: {self.sort}")
        return SORT_COLUMNS[name]

    def sort_descending(self) -> bool:
        return self.sort.startswith("-")

    def order_by(self) -> List:
        """ORDER BY clauses: the sort key, then id ascending as tie-break."""
        column = self.sort_column()
        primary = column.desc() if self.sort_descending() else column.asc()
        return [primary, Movie.id.asc()]

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size
