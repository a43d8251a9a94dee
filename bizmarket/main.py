# bizmarket/main.py
import logging
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .config import settings
from .db import init_db
from .logging_config import configure_logging
from .services.submission import BusinessValidationError
from .routers import (
    businesses as businesses_router,
    api_businesses as api_businesses_router,
)

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Business Marketplace")

# --- CORS ---
allowed_origins = (
    [o.strip() for o in settings.ALLOWED_ORIGINS.split(",")]
    if settings.ALLOWED_ORIGINS
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Сессии (flash-сообщения) ---
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE,
    same_site=(settings.COOKIE_SAMESITE or "lax"),
    https_only=settings.COOKIE_SECURE,
)

# --- Фото листингов ---
Path(settings.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT), name="storage")

# --- Подключение роутеров ---
app.include_router(businesses_router.router)
app.include_router(api_businesses_router.router)


@app.exception_handler(BusinessValidationError)
async def business_validation_handler(request: Request, exc: BusinessValidationError):
    return JSONResponse(
        {"ok": False, "errors": exc.errors},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


# --- Инициализация БД ---
@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("database ready")
