# bizmarket/routers/api_businesses.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..db import get_db
from ..deps import get_current_user, get_current_user_optional
from ..models.user import User
from ..services.businesses import (
    browse_all, search_businesses, list_categories, popular_categories,
    creation_form_data, business_detail,
)
from ..services.pagination import MAX_PAGE
from ..services.storage import PhotoStorage, get_photo_storage
from ..services.submission import store_business, CREATED_MESSAGE
from .businesses import parse_int, groups_to_props, read_submission

router = APIRouter(prefix="/api/businesses", tags=["businesses-api"])


@router.get("")
def api_browse(page: int = Query(1, ge=1, le=MAX_PAGE), db: Session = Depends(get_db)):
    return {
        "ok": True,
        "categories": [c.to_dict() for c in list_categories(db)],
        "popular_categories": [c.to_dict() for c in popular_categories(db)],
        **groups_to_props(browse_all(db, page=page)),
    }


@router.get("/search")
def api_search(
    search: Optional[str] = None,
    category: Optional[str] = None,
    active_transaction_type: Optional[str] = Query(None, alias="activeTransactionType"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    db: Session = Depends(get_db),
):
    groups = search_businesses(db, search=search, category_id=parse_int(category), page=page)
    return {
        "ok": True,
        "search": search,
        "category": parse_int(category),
        "active_transaction_type": active_transaction_type,
        "categories": [c.to_dict() for c in list_categories(db)],
        **groups_to_props(groups),
    }


@router.get("/form")
def api_form(db: Session = Depends(get_db)):
    return {"ok": True, **creation_form_data(db)}


@router.get("/{listing_id}")
def api_business(
    listing_id: str,
    viewer: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    return {"ok": True, **business_detail(db, listing_id, viewer)}


# BusinessValidationError -> 422 отдаёт обработчик в main
@router.post("")
async def api_store(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    payload, photos = await read_submission(request)
    business = await run_in_threadpool(store_business, db, user, payload, photos, storage)
    return JSONResponse(
        {"ok": True, "message": CREATED_MESSAGE, "listing_id": business.listing_id},
        status_code=status.HTTP_201_CREATED,
    )
