from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session

from yelpcamp.api.permissions import Denied, check_comment_ownership, load_campground, require_login
from yelpcamp.api.web import deny, fail, get_current_user, get_db, redirect, render
from yelpcamp.auth.session import flash
from yelpcamp.db.database import UserDB
from yelpcamp.errors import YelpCampError
from yelpcamp.models.schemas import CommentForm, parse_form
from yelpcamp.services import feedback

router = APIRouter(prefix="/campgrounds/{campground_id}/comments")


@router.get("/new")
def new(
    request: Request,
    campground_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    auth = require_login(user)
    if isinstance(auth, Denied):
        return deny(request, auth)
    result = load_campground(db, campground_id)
    if isinstance(result, Denied):
        return deny(request, result)
    return render(request, db, user, "comments/new.html", campground=result.resource)


@router.post("")
def create(
    request: Request,
    campground_id: str,
    text: str = Form(""),
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    auth = require_login(user)
    if isinstance(auth, Denied):
        return deny(request, auth)
    result = load_campground(db, campground_id)
    if isinstance(result, Denied):
        return deny(request, result)
    campground = result.resource

    try:
        feedback.add_comment(db, campground, user, parse_form(CommentForm, {"text": text}))
    except YelpCampError as e:
        return fail(request, str(e), f"/campgrounds/{campground.id}/comments/new")

    flash(request, "Successfully added comment")
    return redirect(f"/campgrounds/{campground.id}")


@router.get("/{comment_id}/edit")
def edit(
    request: Request,
    campground_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = check_comment_ownership(db, user, campground_id, comment_id)
    if isinstance(result, Denied):
        return deny(request, result)
    comment = result.resource
    return render(request, db, user, "comments/edit.html", comment=comment, campground_id=comment.campground_id)


@router.put("/{comment_id}")
def update(
    request: Request,
    campground_id: str,
    comment_id: str,
    text: str = Form(""),
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = check_comment_ownership(db, user, campground_id, comment_id)
    if isinstance(result, Denied):
        return deny(request, result)
    comment = result.resource

    try:
        feedback.update_comment(db, comment, parse_form(CommentForm, {"text": text}))
    except YelpCampError as e:
        return fail(request, str(e), f"/campgrounds/{comment.campground_id}/comments/{comment.id}/edit")
    return redirect(f"/campgrounds/{comment.campground_id}")


@router.delete("/{comment_id}")
def destroy(
    request: Request,
    campground_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = check_comment_ownership(db, user, campground_id, comment_id, allow_campground_owner=True)
    if isinstance(result, Denied):
        return deny(request, result)
    comment = result.resource
    parent_id = comment.campground_id

    try:
        feedback.delete_comment(db, comment)
    except YelpCampError as e:
        return fail(request, str(e), f"/campgrounds/{parent_id}")

    flash(request, "Comment deleted")
    return redirect(f"/campgrounds/{parent_id}")
