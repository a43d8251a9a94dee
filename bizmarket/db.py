from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from .config import settings

# ---------- Declarative Base ----------
class Base(DeclarativeBase):
    pass

# ---------- Engine / Session ----------
# Строка берётся из настроек (например из .env через bizmarket.config.settings)
DATABASE_URL = settings.DATABASE_URL

# Поддержка SQLite и PostgreSQL (или любой другой, поддерживаемый SQLAlchemy)
if DATABASE_URL and DATABASE_URL.startswith("sqlite"):
    # для sqlite важно указать check_same_thread=False: запросы идут из threadpool
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        pool_pre_ping=True,
        future=True,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        future=True,
    )

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)


def init_db() -> None:
    # Импорт моделей, чтобы при create_all были зарегистрированы все таблицы
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

# ---------- Dependency ----------
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
