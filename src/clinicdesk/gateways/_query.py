# List query parameters shared by the paginated gateways.
# Created: 2026-10-18

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

# Filter value the views use for "no status filter".
ALL = "all"


@dataclass(frozen=True)
class ListQuery:
    """Page, page size, free-text search and status filter for a listing."""

    page: int = 1
    limit: int = 10
    search: str = ""
    status: str = ""

    def __post_init__(self):
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

    def with_page(self, page: int) -> ListQuery:
        return replace(self, page=page)

    def to_params(self, *, search: bool = True, status: bool = True) -> dict[str, Any]:
        params: dict[str, Any] = {"page": self.page, "limit": self.limit}
        if search and self.search:
            params["search"] = self.search
        if status and self.status and self.status != ALL:
            params["status"] = self.status
        return params
