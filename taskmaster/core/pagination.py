# taskmaster/core/pagination.py
import math
from dataclasses import dataclass
from typing import Optional

from fastapi import Query

from taskmaster.core.settings import settings


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": math.ceil(total / self.limit) if self.limit else 0,
        }


def get_page_params(
    page: int = Query(1, ge=1, description="Номер страницы"),
    limit: Optional[int] = Query(None, ge=1, description="Размер страницы"),
) -> PageParams:
    """
    Dependency: page/limit из query, limit ограничен MAX_PAGE_SIZE.
    """
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    return PageParams(page=page, limit=min(limit, settings.MAX_PAGE_SIZE))
