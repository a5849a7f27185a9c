"""Page of list items plus pagination metadata."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One fetched page.

    ``has_more`` compares the page number to ``total_pages`` from the same
    response. When the server omits ``totalPages`` a full page is taken to
    mean more may follow.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    items: list[T] = Field(default_factory=list)
    page_number: int = 1
    page_size: int = 0
    total_pages: int | None = None
    total_count: int | None = None
    unread_count: int | None = None

    @property
    def has_more(self) -> bool:
        if self.total_pages is not None:
            return self.page_number < self.total_pages
        return self.page_size > 0 and len(self.items) >= self.page_size

    @classmethod
    def empty(cls, page_number: int = 1) -> Page[T]:
        return cls(items=[], page_number=page_number, total_pages=page_number)
