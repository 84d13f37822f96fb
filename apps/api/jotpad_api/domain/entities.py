from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

SortOrder = Literal["title_asc", "title_desc", "created_asc", "created_desc", "updated_asc", "updated_desc"]

SORT_ORDERS: tuple[str, ...] = (
    "title_asc",
    "title_desc",
    "created_asc",
    "created_desc",
    "updated_asc",
    "updated_desc",
)
DEFAULT_SORT_ORDER: SortOrder = "updated_desc"


@dataclass(frozen=True)
class Note:
    id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
