import secrets
import string
import uuid

_ALPHABET = string.ascii_letters + string.digits


def generate_listing_id() -> str:
    """Публичный id листинга: непрозрачный уникальный токен."""
    return uuid.uuid4().hex


def random_filename(extension: str | None, length: int = 50) -> str:
    name = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    extension = (extension or "").lstrip(".").lower()
    return f"{name}.{extension}" if extension else name
