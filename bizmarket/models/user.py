from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base

# закладки пользователя (user <-> business)
user_bookmarks = Table(
    "bookmarks",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("business_id", Integer, ForeignKey("businesses.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    businesses = relationship("Business", back_populates="owner")
    bookmarks = relationship("Business", secondary=user_bookmarks, order_by="Business.id")

    # Удобное отображаемое имя
    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@", 1)[0]

    def to_dict(self):
        return {"id": self.id, "name": self.display_name}
