from .base import Base
from .user import User, user_bookmarks
from .category import Category, Property
from .business import (
    Business, BusinessImage, TransactionType, ApprovalStatus, SaleStatus, business_watchers
)

__all__ = [
    "Base",
    "User",
    "user_bookmarks",
    "Category",
    "Property",
    "Business",
    "BusinessImage",
    "TransactionType",
    "ApprovalStatus",
    "SaleStatus",
    "business_watchers",
]
