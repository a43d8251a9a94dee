import io
import itertools
import os
import tempfile

import pytest

_TMP = tempfile.mkdtemp(prefix="bizmarket-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/test.db"
os.environ["MEDIA_ROOT"] = f"{_TMP}/media"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["COOKIE_SECURE"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from bizmarket.db import Base, SessionLocal, engine, init_db  # noqa: E402
from bizmarket.main import app  # noqa: E402
from bizmarket.models import (  # noqa: E402
    ApprovalStatus, Business, Category, Property, SaleStatus, TransactionType, User,
)
from bizmarket.services.storage import PhotoStorage, get_photo_storage  # noqa: E402
from bizmarket.utils.security import create_user_token  # noqa: E402

_seq = itertools.count(1)


class FakeUpload:
    """Минимальный аналог UploadFile для сервисных тестов."""

    def __init__(self, filename, content=b"fake-image-bytes", content_type="image/png"):
        self.filename = filename
        self.content_type = content_type
        self.file = io.BytesIO(content)


@pytest.fixture()
def db():
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def storage(tmp_path):
    return PhotoStorage(tmp_path / "media", "/storage")


@pytest.fixture()
def client(db, storage):
    app.dependency_overrides[get_photo_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def _make(name="Ada", email=None):
        user = User(name=name, email=email or f"user{next(_seq)}@example.com")
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture()
def make_category(db):
    def _make(name="Restaurants", status=True, business_count=0):
        category = Category(name=name, status=status, business_count=business_count)
        db.add(category)
        db.commit()
        return category
    return _make


@pytest.fixture()
def make_property(db):
    def _make(name="Owned", status=True):
        prop = Property(name=name, status=status)
        db.add(prop)
        db.commit()
        return prop
    return _make


@pytest.fixture()
def make_business(db, make_user, make_category, make_property):
    owner_cache = {}

    def _make(business_name=None, **overrides):
        n = next(_seq)
        if "owner" not in owner_cache:
            owner_cache["owner"] = make_user(name="Owner")
            owner_cache["category"] = make_category(name="General")
            owner_cache["property"] = make_property(name="Leased")
        fields = dict(
            listing_id=f"listing-{n}",
            user_id=owner_cache["owner"].id,
            business_name=business_name or f"Business {n}",
            business_number=f"RC-{n}",
            business_year="2015",
            business_type="Limited",
            category_id=owner_cache["category"].id,
            property_id=owner_cache["property"].id,
            age="8 years",
            description="Going concern",
            staffs=5,
            transaction_type=TransactionType.SALE,
            price=1_000_000,
            profit_margin=12.5,
            status=ApprovalStatus.APPROVED,
            business_status=SaleStatus.UNSOLD,
            business_state=True,
        )
        fields.update(overrides)
        business = Business(**fields)
        db.add(business)
        db.commit()
        return business
    return _make


@pytest.fixture()
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_user_token(user.id)}"}
    return _headers


@pytest.fixture()
def valid_payload(make_category, make_property):
    category = make_category(name="Hospitality")
    prop = make_property(name="Owned")
    return {
        "business_name": "Cafe Deluxe",
        "business_year": "2012",
        "business_type": "Sole proprietorship",
        "category_id": str(category.id),
        "property_id": str(prop.id),
        "age": "12 years",
        "business_number": "RC-778899",
        "description": "Busy cafe near the market",
        "staffs": "7",
        "transaction_type": "sale",
        "price": "2500000",
        "profit_margin": "18.5",
        "city": "Ikeja",
        "state": "Lagos",
    }
