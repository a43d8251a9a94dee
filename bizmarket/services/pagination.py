from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

# дальше страниц не бывает; иначе offset не влезает в INTEGER базы
MAX_PAGE = 10_000


@dataclass
class Page:
    items: list[Any] = field(default_factory=list)
    total: int = 0
    current_page: int = 1
    per_page: int = 15

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    @property
    def has_more(self) -> bool:
        return self.current_page < self.last_page

    def to_dict(self) -> dict:
        start = (self.current_page - 1) * self.per_page + 1 if self.items else None
        return {
            "data": [x.to_dict() for x in self.items],
            "current_page": self.current_page,
            "per_page": self.per_page,
            "total": self.total,
            "last_page": self.last_page,
            "from": start,
            "to": (start + len(self.items) - 1) if start else None,
        }


def paginate(
    db: Session,
    model,
    where,
    page: int = 1,
    per_page: int = 15,
    options: Sequence = (),
    order_by=None,
) -> Page:
    """Страница записей model по условию where (порядок по умолчанию: по id)."""
    page = min(max(1, int(page or 1)), MAX_PAGE)
    total = db.execute(select(func.count()).select_from(model).where(where)).scalar_one()

    stmt = (
        select(model)
        .where(where)
        .options(*options)
        .order_by(order_by if order_by is not None else model.id)
        .limit(per_page)
        .offset((page - 1) * per_page)
    )
    items = list(db.execute(stmt).scalars().all())
    return Page(items=items, total=total, current_page=page, per_page=per_page)
