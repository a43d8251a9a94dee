from __future__ import annotations

import datetime as dt
import logging
import mimetypes
import re
from pathlib import PurePath
from typing import Any, Mapping, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..models.business import Business, BusinessImage, TransactionType, ApprovalStatus, SaleStatus
from ..models.category import Category, Property
from ..models.user import User
from ..utils.ids import generate_listing_id, random_filename
from .storage import PhotoStorage

logger = logging.getLogger(__name__)

CREATED_MESSAGE = (
    "Business has been created and under review, "
    "you will been notified via email once approved!"
)

REQUIRED_FIELDS = (
    "business_name", "business_year", "business_type", "category_id", "property_id",
    "age", "business_number", "description", "staffs", "transaction_type",
    "price", "profit_margin",
)
OPTIONAL_FIELDS = ("address", "lga", "city", "state", "country", "landmark")

_YEAR_RE = re.compile(r"[0-9]{4}")

# только картинки: всё остальное отдаётся статикой с нашего домена
PHOTO_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}


class BusinessValidationError(ValueError):
    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


def _label(field: str) -> str:
    return field.removesuffix("_id").replace("_", " ")


def _text(payload: Mapping[str, Any], field: str) -> str | None:
    raw = payload.get(field)
    if raw is None:
        return None
    return str(raw).strip() or None


def _as_int(raw: str) -> int | None:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _as_float(raw: str) -> float | None:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _parse_ends(raw: str) -> dt.datetime | None:
    value = dt.datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value


def photo_extension(photo) -> str | None:
    """Расширение по MIME, иначе по имени файла клиента."""
    content_type = (getattr(photo, "content_type", None) or "").split(";")[0].strip()
    ext = mimetypes.guess_extension(content_type) if content_type else None
    if ext == ".jpe":
        ext = ".jpg"
    if not ext:
        ext = PurePath(getattr(photo, "filename", None) or "").suffix or None
    return ext.lstrip(".").lower() if ext else None


def is_image_upload(photo) -> bool:
    content_type = (getattr(photo, "content_type", None) or "").split(";")[0].strip().lower()
    return content_type.startswith("image/") and photo_extension(photo) in PHOTO_EXTENSIONS


def _unique_errors(db: Session, name: str | None, number: str | None) -> dict[str, str]:
    errors: dict[str, str] = {}
    if name and db.execute(
        select(Business.id).where(Business.business_name == name)
    ).first():
        errors["business_name"] = "The business name has already been taken."
    if number and db.execute(
        select(Business.id).where(Business.business_number == number)
    ).first():
        errors["business_number"] = "Reg. number has been used!"
    return errors


def validate_business_payload(
    db: Session, payload: Mapping[str, Any], photos: Sequence
) -> tuple[dict[str, Any], dict[str, str]]:
    """Вернуть (очищенные данные, ошибки по полям)."""
    errors: dict[str, str] = {}
    data: dict[str, Any] = {}

    for field in REQUIRED_FIELDS:
        value = _text(payload, field)
        if value is None:
            errors[field] = f"The {_label(field)} field is required."
        data[field] = value

    if not photos:
        errors["photos"] = "The photos field is required."
    elif not all(is_image_upload(p) for p in photos):
        errors["photos"] = "The photos must be images of type: jpg, jpeg, png, gif, webp."

    year = data["business_year"]
    if year is not None and not _YEAR_RE.fullmatch(year):
        errors["business_year"] = "The business year must be 4 digits."

    for field in ("category_id", "property_id", "staffs", "price"):
        if data[field] is None:
            continue
        value = _as_int(data[field])
        if value is None:
            errors[field] = f"The {_label(field)} must be an integer."
        data[field] = value

    for field, model in (("category_id", Category), ("property_id", Property)):
        if field in errors or data[field] is None:
            continue
        ref = db.get(model, data[field])
        if ref is None or not ref.status:
            errors[field] = f"The selected {field.replace('_', ' ')} is invalid."

    if data["profit_margin"] is not None:
        margin = _as_float(data["profit_margin"])
        if margin is None:
            errors["profit_margin"] = "The profit margin must be a number."
        data["profit_margin"] = margin

    if data["transaction_type"] is not None:
        tt = TransactionType.parse(data["transaction_type"])
        if tt is None:
            errors["transaction_type"] = "The selected transaction type is invalid."
        data["transaction_type"] = tt

    ends = _text(payload, "ends")
    data["ends"] = None
    if ends is not None:
        try:
            data["ends"] = _parse_ends(ends)
        except ValueError:
            errors["ends"] = "The ends is not a valid date."

    for field in OPTIONAL_FIELDS:
        data[field] = _text(payload, field)

    for field, message in _unique_errors(db, data["business_name"], data["business_number"]).items():
        errors.setdefault(field, message)

    return data, errors


def store_business(
    db: Session,
    owner: User,
    payload: Mapping[str, Any],
    photos: Sequence,
    storage: PhotoStorage,
) -> Business:
    """
    Создать листинг (уходит в модерацию) вместе с фото.
    Всё или ничего: при сбое хранилища уже записанные файлы удаляются, транзакция откатывается.
    """
    photos = [p for p in photos if p is not None and getattr(p, "filename", None)]
    data, errors = validate_business_payload(db, payload, photos)
    if errors:
        raise BusinessValidationError(errors)

    business = Business(
        listing_id=generate_listing_id(),
        user_id=owner.id,
        status=ApprovalStatus.PENDING,
        business_status=SaleStatus.UNSOLD,
        business_state=True,
        **data,
    )
    db.add(business)

    stored: list[str] = []
    try:
        for photo in photos:
            filename = random_filename(photo_extension(photo))
            path = storage.store(photo.file, settings.BUSINESS_PHOTO_DIR, filename)
            stored.append(path)
            business.images.append(BusinessImage(url=storage.url(path), path=path))

        db.execute(
            update(Category)
            .where(Category.id == business.category_id)
            .values(business_count=Category.business_count + 1)
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        _discard(storage, stored)
        # проиграли гонку на уникальности: отдать как ошибку валидации
        errors = _unique_errors(db, data["business_name"], data["business_number"])
        if not errors:
            raise
        logger.warning("unique constraint race on business %r", data["business_name"])
        raise BusinessValidationError(errors)
    except Exception:
        db.rollback()
        _discard(storage, stored)
        raise

    db.refresh(business)
    logger.info(
        "business %s created by user %s with %d photo(s)",
        business.listing_id, owner.id, len(stored),
    )
    return business


def _discard(storage: PhotoStorage, paths: list[str]) -> None:
    for path in paths:
        try:
            storage.delete(path)
        except OSError as e:
            logger.warning("cannot remove orphaned photo %s: %s", path, e)
