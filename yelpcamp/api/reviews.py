from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session

from yelpcamp.api.permissions import Denied, check_review_ownership, load_campground, require_login
from yelpcamp.api.web import deny, fail, get_current_user, get_db, redirect, render
from yelpcamp.auth.session import flash
from yelpcamp.db.database import UserDB
from yelpcamp.errors import YelpCampError
from yelpcamp.models.schemas import ReviewForm, parse_form
from yelpcamp.services import feedback

router = APIRouter(prefix="/campgrounds/{campground_id}/reviews")


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
    return render(request, db, user, "reviews/new.html", campground=result.resource)


@router.post("")
def create(
    request: Request,
    campground_id: str,
    rating: str = Form(""),
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
        form = parse_form(ReviewForm, {"rating": rating, "text": text})
        feedback.add_review(db, campground, user, form)
    except YelpCampError as e:
        flash(request, str(e), "error")
        return redirect(f"/campgrounds/{campground.id}")

    flash(request, "Your review has been successfully added.")
    return redirect(f"/campgrounds/{campground.id}")


@router.get("/{review_id}/edit")
def edit(
    request: Request,
    campground_id: str,
    review_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = check_review_ownership(db, user, campground_id, review_id)
    if isinstance(result, Denied):
        return deny(request, result)
    review = result.resource
    return render(request, db, user, "reviews/edit.html", review=review, campground_id=review.campground_id)


@router.put("/{review_id}")
def update(
    request: Request,
    campground_id: str,
    review_id: str,
    rating: str = Form(""),
    text: str = Form(""),
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = check_review_ownership(db, user, campground_id, review_id)
    if isinstance(result, Denied):
        return deny(request, result)
    review = result.resource

    try:
        feedback.update_review(db, review, parse_form(ReviewForm, {"rating": rating, "text": text}))
    except YelpCampError as e:
        return fail(request, str(e), f"/campgrounds/{review.campground_id}/reviews/{review.id}/edit")

    flash(request, "Your review was successfully edited.")
    return redirect(f"/campgrounds/{review.campground_id}")


@router.delete("/{review_id}")
def destroy(
    request: Request,
    campground_id: str,
    review_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = check_review_ownership(db, user, campground_id, review_id)
    if isinstance(result, Denied):
        return deny(request, result)
    review = result.resource
    parent_id = review.campground_id

    try:
        feedback.delete_review(db, review)
    except YelpCampError as e:
        return fail(request, str(e), f"/campgrounds/{parent_id}")

    flash(request, "Your review was deleted successfully.")
    return redirect(f"/campgrounds/{parent_id}")
