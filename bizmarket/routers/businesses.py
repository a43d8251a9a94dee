# bizmarket/routers/businesses.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from ..db import get_db
from ..deps import get_current_user, get_current_user_optional
from ..models.user import User
from ..services.businesses import (
    browse_all, search_businesses, list_categories, popular_categories,
    creation_form_data, business_detail,
)
from ..services.pagination import MAX_PAGE
from ..services.storage import PhotoStorage, get_photo_storage
from ..services.submission import store_business, BusinessValidationError, CREATED_MESSAGE
from ..views import render, flash

router = APIRouter(tags=["businesses"])


# ---------- helpers ----------
def parse_int(raw: Optional[str]) -> Optional[int]:
    # пустая строка / мусор в query == фильтр не задан
    try:
        return int(raw) if raw not in (None, "") else None
    except ValueError:
        return None


def groups_to_props(groups: dict) -> dict:
    return {key: page.to_dict() for key, page in groups.items()}


async def read_submission(request: Request) -> tuple[dict, list[UploadFile]]:
    form = await request.form()
    payload = {k: v for k, v in form.multi_items() if not isinstance(v, UploadFile)}
    photos = [p for p in form.getlist("photos") if isinstance(p, UploadFile)]
    return payload, photos


# ---------- HTML ----------
@router.get("/", include_in_schema=False)
def index():
    return RedirectResponse("/businesses", status_code=307)


@router.get("/businesses")
def businesses_page(request: Request, page: int = Query(1, ge=1, le=MAX_PAGE), db: Session = Depends(get_db)):
    props = {
        "categories": [c.to_dict() for c in list_categories(db)],
        "popular_categories": [c.to_dict() for c in popular_categories(db)],
        **groups_to_props(browse_all(db, page=page)),
    }
    return render(request, "Businesses", props)


@router.get("/businesses/search")
def businesses_search_page(
    request: Request,
    search: Optional[str] = None,
    category: Optional[str] = None,
    active_transaction_type: Optional[str] = Query(None, alias="activeTransactionType"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    db: Session = Depends(get_db),
):
    groups = search_businesses(db, search=search, category_id=parse_int(category), page=page)
    props = {
        "search": search,
        "category": parse_int(category),
        "active_transaction_type": active_transaction_type,
        "categories": [c.to_dict() for c in list_categories(db)],
        **groups_to_props(groups),
    }
    return render(request, "Businesses", props)


@router.get("/post")
def post_page(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return render(request, "Post", {**creation_form_data(db), "errors": {}, "old": {}})


@router.get("/business/{listing_id}")
def business_page(
    request: Request,
    listing_id: str,
    viewer: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    return render(request, "Business", business_detail(db, listing_id, viewer))


@router.post("/businesses")
async def businesses_store(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    payload, photos = await read_submission(request)
    try:
        await run_in_threadpool(store_business, db, user, payload, photos, storage)
    except BusinessValidationError as e:
        form_data = await run_in_threadpool(creation_form_data, db)
        props = {**form_data, "errors": e.errors, "old": payload}
        return render(request, "Post", props, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)

    flash(request, CREATED_MESSAGE)
    back = request.headers.get("referer") or "/post"
    return RedirectResponse(back, status_code=status.HTTP_303_SEE_OTHER)


@router.put("/businesses/{listing_id}")
def businesses_update(listing_id: str, user: User = Depends(get_current_user)):
    # редактирование листинга пока не реализовано
    return Response(status_code=status.HTTP_204_NO_CONTENT)
