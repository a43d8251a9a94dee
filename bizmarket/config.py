# bizmarket/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # читаем .env, лишние ключи игнорируем
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # База данных
    DATABASE_URL: str = "sqlite:///./bizmarket.db"

    # Безопасность и куки
    SECRET_KEY: str = "dev-secret"
    COOKIE_NAME: str = "access_token"
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"
    SESSION_COOKIE: str = "bizmarket_session"

    # JWT
    JWT_TTL_SEC: int = 60 * 60 * 24 * 7
    JWT_ALG: str = "HS256"

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Листинги
    PAGE_SIZE: int = 15
    POPULAR_CATEGORIES_LIMIT: int = 8

    # Хранилище фото
    MEDIA_ROOT: str = "storage"
    MEDIA_URL: str = "/storage"
    BUSINESS_PHOTO_DIR: str = "businesses"

    LOG_LEVEL: str = "INFO"


settings = Settings()
