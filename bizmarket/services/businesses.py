from __future__ import annotations

from dataclasses import dataclass, replace

from sqlalchemy import and_, select
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..models.business import Business, TransactionType, ApprovalStatus, SaleStatus
from ..models.category import Category, Property
from ..models.user import User
from .pagination import Page, paginate

# листинги в ленте всегда идут вместе с фото и категорией
_LIST_OPTIONS = (selectinload(Business.images), selectinload(Business.category))


@dataclass(frozen=True)
class ListingCriteria:
    search: str | None = None
    category_id: int | None = None
    transaction_type: TransactionType | None = None


def visibility_filter():
    """Публично виден только одобренный, непроданный и активный листинг."""
    return and_(
        Business.status == ApprovalStatus.APPROVED,
        Business.business_status == SaleStatus.UNSOLD,
        Business.business_state.is_(True),
    )


def build_filter(criteria: ListingCriteria):
    clauses = [visibility_filter()]
    if criteria.search:
        clauses.append(Business.business_name.contains(criteria.search, autoescape=True))
    if criteria.category_id:
        clauses.append(Business.category_id == criteria.category_id)
    if criteria.transaction_type is not None:
        clauses.append(Business.transaction_type == criteria.transaction_type)
    return and_(*clauses)


def _grouped(db: Session, criteria: ListingCriteria, page: int) -> dict[str, Page]:
    # одна страница на каждый тип сделки, общий параметр page
    return {
        t.value: paginate(
            db,
            Business,
            build_filter(replace(criteria, transaction_type=t)),
            page=page,
            per_page=settings.PAGE_SIZE,
            options=_LIST_OPTIONS,
        )
        for t in TransactionType
    }


def browse_all(db: Session, page: int = 1) -> dict[str, Page]:
    return _grouped(db, ListingCriteria(), page)


def search_businesses(
    db: Session,
    search: str | None = None,
    category_id: int | None = None,
    page: int = 1,
) -> dict[str, Page]:
    criteria = ListingCriteria(search=(search or "").strip() or None, category_id=category_id)
    return _grouped(db, criteria, page)


# ---- справочники ----

def list_categories(db: Session) -> list[Category]:
    return db.execute(select(Category).order_by(Category.id)).scalars().all()


def popular_categories(db: Session, limit: int | None = None) -> list[Category]:
    return db.execute(
        select(Category)
        .order_by(Category.business_count.desc(), Category.id)
        .limit(limit or settings.POPULAR_CATEGORIES_LIMIT)
    ).scalars().all()


def creation_form_data(db: Session) -> dict:
    categories = db.execute(
        select(Category).where(Category.status.is_(True)).order_by(Category.name)
    ).scalars().all()
    properties = db.execute(
        select(Property).where(Property.status.is_(True)).order_by(Property.name)
    ).scalars().all()
    return {
        "categories": [c.to_dict() for c in categories],
        "properties": [p.to_dict() for p in properties],
        "transaction_types": TransactionType.to_object(),
    }


# ---- карточка листинга ----

def get_business(db: Session, listing_id: str) -> Business | None:
    return db.execute(
        select(Business)
        .where(Business.listing_id == listing_id)
        .options(
            selectinload(Business.images),
            selectinload(Business.category),
            selectinload(Business.business_property),
            selectinload(Business.watchers),
            selectinload(Business.owner),
        )
    ).scalar_one_or_none()


def business_detail(db: Session, listing_id: str, viewer: User | None) -> dict:
    """
    Нет листинга — business=None, без ошибки: пусть решает шаблон.
    Закладки только у залогиненного зрителя.
    """
    business = get_business(db, listing_id)
    bookmarks = [
        {"id": b.id, "listing_id": b.listing_id, "business_name": b.business_name}
        for b in viewer.bookmarks
    ] if viewer else []
    return {
        "user": viewer.to_dict() if viewer else None,
        "business": business.to_dict(detail=True) if business else None,
        "bookmarks": bookmarks,
        "is_logged_in": viewer is not None,
    }
