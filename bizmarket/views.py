# bizmarket/views.py
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

# Абсолютный путь к templates/, чтобы не ловить TemplateNotFound
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# имя вью -> шаблон
VIEWS = {
    "Businesses": "businesses.html",
    "Business": "business.html",
    "Post": "post.html",
}


def flash(request: Request, message: str) -> None:
    request.session["message"] = message


def render(request: Request, view: str, props: dict, status_code: int = 200):
    """Отрисовать вью с props; flash-сообщение из сессии забирается один раз."""
    context = {
        **props,
        "props": props,
        "flash": request.session.pop("message", None),
    }
    return templates.TemplateResponse(request, VIEWS[view], context, status_code=status_code)
