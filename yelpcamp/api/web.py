"""Request-scoped dependencies and response helpers shared by the routers."""
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from yelpcamp.api.permissions import Denied
from yelpcamp.auth.session import current_user, flash, get_flashed_messages
from yelpcamp.db.database import UserDB
from yelpcamp.services.notifications import unread_notifications

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def get_db(request: Request):
    db = request.app.state.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[UserDB]:
    return current_user(request, db)


def get_geocoder(request: Request):
    return request.app.state.geocoder


def get_image_store(request: Request):
    return request.app.state.image_store


def render(request: Request, db: Session, viewer: Optional[UserDB], template: str, **context):
    context.update(
        current_user=viewer,
        notifications=unread_notifications(db, viewer) if viewer is not None else [],
        messages=get_flashed_messages(request),
    )
    return templates.TemplateResponse(request, template, context)


def redirect(url: str) -> RedirectResponse:
    # 303 so the browser follows a POST/PUT/DELETE with a GET
    return RedirectResponse(url, status_code=303)


def redirect_back(request: Request, fallback: str) -> RedirectResponse:
    referer = request.headers.get("referer")
    if referer:
        parts = urlsplit(referer)
        if not parts.netloc or parts.netloc == request.url.netloc:
            path = parts.path or fallback
            return redirect(f"{path}?{parts.query}" if parts.query else path)
    return redirect(fallback)


def deny(request: Request, denied: Denied) -> RedirectResponse:
    flash(request, denied.reason, "error")
    return redirect(denied.redirect_to)


def fail(request: Request, message: str, fallback: str) -> RedirectResponse:
    flash(request, message, "error")
    return redirect_back(request, fallback)
