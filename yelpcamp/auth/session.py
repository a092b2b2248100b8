"""Session-backed identity and flash messages.

The session itself is a signed cookie maintained by Starlette's
SessionMiddleware; this module only decides what goes into it.
"""
from typing import List, Optional, Tuple

from fastapi import Request
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from yelpcamp.db.database import UserDB

SESSION_USER_KEY = "user_id"
FLASH_KEY = "_flashes"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def authenticate(db: Session, username: str, password: str) -> Optional[UserDB]:
    user = db.query(UserDB).filter(UserDB.username == username).first()
    if user is None or not check_password_hash(user.password_hash, password):
        return None
    return user


def login_user(request: Request, user: UserDB) -> None:
    request.session[SESSION_USER_KEY] = user.id


def logout_user(request: Request) -> None:
    request.session.pop(SESSION_USER_KEY, None)


def current_user(request: Request, db: Session) -> Optional[UserDB]:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    user = db.get(UserDB, user_id)
    if user is None:
        # stale session for a user that no longer exists
        logout_user(request)
    return user


def flash(request: Request, message: str, category: str = "success") -> None:
    flashes = request.session.get(FLASH_KEY, [])
    flashes.append([category, message])
    request.session[FLASH_KEY] = flashes


def get_flashed_messages(request: Request) -> List[Tuple[str, str]]:
    return [tuple(item) for item in request.session.pop(FLASH_KEY, [])]
