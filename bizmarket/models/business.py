from __future__ import annotations
import datetime as dt
import enum

from sqlalchemy import (
    Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, Enum, Index, Table
)
from sqlalchemy.orm import relationship

from .base import Base


class TransactionType(str, enum.Enum):
    AUCTION    = "auction"
    SALE       = "sale"
    INVESTMENT = "investment"
    LEASE      = "lease"

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, raw) -> "TransactionType | None":
        """Принимает значение ("sale") или имя ("Sale"/"SALE"); иначе None."""
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        return None

    @classmethod
    def to_object(cls) -> dict[str, str]:
        return {m.label: m.value for m in cls}


class ApprovalStatus(str, enum.Enum):
    PENDING  = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SaleStatus(str, enum.Enum):
    UNSOLD = "unsold"
    SOLD   = "sold"


# пользователи, следящие за листингом
business_watchers = Table(
    "business_watchers",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("business_id", Integer, ForeignKey("businesses.id", ondelete="CASCADE"), primary_key=True),
)


def _utcnow():
    return dt.datetime.now(dt.timezone.utc)


def _iso(x):
    return x.isoformat() if x else None


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True)
    listing_id = Column(String(64), unique=True, nullable=False, index=True)  # публичный id
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    business_name = Column(String(200), unique=True, nullable=False)
    business_number = Column(String(100), unique=True, nullable=False)  # рег. номер
    business_year = Column(String(4), nullable=False)
    business_type = Column(String(120), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
    age = Column(String(60), nullable=False)
    description = Column(Text, nullable=False)
    staffs = Column(Integer, nullable=False)

    address = Column(String(255), nullable=True)
    lga = Column(String(120), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(120), nullable=True)
    country = Column(String(120), nullable=True)
    landmark = Column(String(255), nullable=True)

    transaction_type = Column(Enum(TransactionType), nullable=False)
    price = Column(Integer, nullable=False)
    profit_margin = Column(Float, nullable=False)
    ends = Column(DateTime(timezone=True), nullable=True)   # конец аукциона

    status = Column(Enum(ApprovalStatus), nullable=False, default=ApprovalStatus.PENDING)
    business_status = Column(Enum(SaleStatus), nullable=False, default=SaleStatus.UNSOLD)
    business_state = Column(Boolean, nullable=False, default=True)   # активен ли листинг

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=True)

    owner = relationship("User", back_populates="businesses")
    category = relationship("Category")
    business_property = relationship("Property")
    images = relationship(
        "BusinessImage",
        back_populates="business",
        cascade="all, delete-orphan",
        order_by="BusinessImage.id",
    )
    watchers = relationship("User", secondary=business_watchers)

    __table_args__ = (
        Index("ix_businesses_visibility", "status", "business_status", "business_state"),
        Index("ix_businesses_transaction_type", "transaction_type"),
    )

    @property
    def is_public(self) -> bool:
        return (
            self.status == ApprovalStatus.APPROVED
            and self.business_status == SaleStatus.UNSOLD
            and bool(self.business_state)
        )

    # сериализатор для шаблонов и JSON (images/category грузятся всегда вместе с листингом)
    def to_dict(self, detail: bool = False):
        out = {
            "id": self.id,
            "listing_id": self.listing_id,
            "business_name": self.business_name,
            "business_number": self.business_number,
            "business_year": self.business_year,
            "business_type": self.business_type,
            "age": self.age,
            "description": self.description,
            "staffs": self.staffs,
            "location": {
                "address": self.address,
                "lga": self.lga,
                "city": self.city,
                "state": self.state,
                "country": self.country,
                "landmark": self.landmark,
            },
            "transaction_type": self.transaction_type.value if self.transaction_type else None,
            "price": self.price,
            "profit_margin": self.profit_margin,
            "ends": _iso(self.ends),
            "status": self.status.value if self.status else None,
            "business_status": self.business_status.value if self.business_status else None,
            "business_state": self.business_state,
            "is_public": self.is_public,
            "category": self.category.to_dict() if self.category else None,
            "images": [img.to_dict() for img in self.images],
            "created_at": _iso(self.created_at),
        }
        if detail:
            out["property"] = self.business_property.to_dict() if self.business_property else None
            out["owner"] = self.owner.to_dict() if self.owner else None
            out["watchers"] = [u.to_dict() for u in self.watchers]
        return out


class BusinessImage(Base):
    __tablename__ = "business_images"

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String(1000), nullable=False)    # публичный URL
    path = Column(String(500), nullable=False)    # путь в хранилище

    business = relationship("Business", back_populates="images")

    def to_dict(self):
        return {"id": self.id, "url": self.url, "path": self.path}
