"""Pagination helper for SQLAlchemy queries."""

from __future__ import annotations

from math import ceil
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Query


def paginate(
    query: Query,
    page: int = 1,
    per_page: int = 20,
    serializer: Optional[Callable[[Any], Any]] = None,
) -> Dict[str, Any]:
    page = max(page, 1)
    per_page = max(min(per_page, 100), 1)
    items = query.limit(per_page).offset((page - 1) * per_page).all()
    total = query.order_by(None).count()
    if serializer is not None:
        items = [serializer(item) for item in items]
    return {
        "items": items,
        "page": page,
        "per_page": per_page,
        "total": total,
        "pages": ceil(total / per_page) if total else 0,
    }
