from sqlalchemy import Column, Integer, String, Boolean
from .base import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    status = Column(Boolean, default=True, nullable=False)
    # денормализованный счётчик листингов категории
    business_count = Column(Integer, default=0, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "business_count": self.business_count,
        }


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)   # тип собственности: "Owned", "Rented", ...
    status = Column(Boolean, default=True, nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "status": self.status}
