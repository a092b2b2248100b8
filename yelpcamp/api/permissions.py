"""Login and ownership checks.

Each check returns ``Authorized(resource)`` or ``Denied(message, redirect_to)``
and the route handler decides what to do with it, so the loaded resource is
handed over without a second lookup.
"""
from dataclasses import dataclass
from typing import Any, Optional, Union

from sqlalchemy.orm import Session

from yelpcamp.db.database import UserDB
from yelpcamp.errors import NotFound
from yelpcamp.services.campgrounds import get_campground
from yelpcamp.services.feedback import get_comment, get_review

LOGIN_REQUIRED = "You need to be logged in to do that"
NO_PERMISSION = "You don't have permission to do that"


@dataclass(frozen=True)
class Authorized:
    resource: Any


@dataclass(frozen=True)
class Denied:
    reason: str
    redirect_to: str


AuthResult = Union[Authorized, Denied]


def require_login(user: Optional[UserDB]) -> AuthResult:
    if user is None:
        return Denied(LOGIN_REQUIRED, "/login")
    return Authorized(user)


def load_campground(db: Session, campground_id) -> AuthResult:
    try:
        return Authorized(get_campground(db, campground_id))
    except NotFound as e:
        return Denied(str(e), "/campgrounds")


def check_campground_ownership(db: Session, user: Optional[UserDB], campground_id) -> AuthResult:
    if user is None:
        return Denied(LOGIN_REQUIRED, "/login")
    result = load_campground(db, campground_id)
    if isinstance(result, Denied):
        return result
    campground = result.resource
    if campground.author_id != user.id:
        return Denied(NO_PERMISSION, f"/campgrounds/{campground.id}")
    return result


def check_comment_ownership(db: Session, user: Optional[UserDB], campground_id, comment_id,
                            allow_campground_owner=False) -> AuthResult:
    """Authorized(comment) for its author, and for the campground's author when allowed."""
    if user is None:
        return Denied(LOGIN_REQUIRED, "/login")
    result = load_campground(db, campground_id)
    if isinstance(result, Denied):
        return result
    campground = result.resource
    try:
        comment = get_comment(db, campground, comment_id)
    except NotFound as e:
        return Denied(str(e), f"/campgrounds/{campground.id}")
    if comment.author_id == user.id:
        return Authorized(comment)
    if allow_campground_owner and campground.author_id == user.id:
        return Authorized(comment)
    return Denied(NO_PERMISSION, f"/campgrounds/{campground.id}")


def check_review_ownership(db: Session, user: Optional[UserDB], campground_id, review_id) -> AuthResult:
    if user is None:
        return Denied(LOGIN_REQUIRED, "/login")
    result = load_campground(db, campground_id)
    if isinstance(result, Denied):
        return result
    campground = result.resource
    try:
        review = get_review(db, campground, review_id)
    except NotFound as e:
        return Denied(str(e), f"/campgrounds/{campground.id}")
    if review.author_id != user.id:
        return Denied(NO_PERMISSION, f"/campgrounds/{campground.id}")
    return Authorized(review)
