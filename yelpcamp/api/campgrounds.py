import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from yelpcamp.api.permissions import Denied, check_campground_ownership, load_campground, require_login
from yelpcamp.api.web import (
    deny, fail, get_current_user, get_db, get_geocoder, get_image_store, redirect, render,
)
from yelpcamp.auth.session import flash
from yelpcamp.db.database import UserDB
from yelpcamp.errors import YelpCampError
from yelpcamp.models.schemas import CampgroundForm, parse_form
from yelpcamp.services import campgrounds as campground_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/campgrounds")


# INDEX - show all campgrounds
@router.get("")
def index(
    request: Request,
    search: Optional[str] = None,
    page: Optional[str] = None,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = campground_service.list_campgrounds(db, search=search, page=page)
    if search and not result.campgrounds:
        flash(request, "No campgrounds match that search. Please try again.", "error")
        return redirect("/campgrounds")
    return render(
        request, db, user, "campgrounds/index.html",
        campgrounds=result.campgrounds,
        current=result.current,
        pages=result.pages,
        search=result.search,
        page="campgrounds",
    )


# CREATE - add new campground to DB
@router.post("")
def create(
    request: Request,
    name: str = Form(""),
    price: str = Form(""),
    description: str = Form(""),
    location: str = Form(""),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
    geocoder=Depends(get_geocoder),
    images=Depends(get_image_store),
):
    auth = require_login(user)
    if isinstance(auth, Denied):
        return deny(request, auth)

    try:
        form = parse_form(CampgroundForm, dict(name=name, price=price, description=description, location=location))
        campground, failed = campground_service.create_campground(db, geocoder, images, user, form, image)
    except YelpCampError as e:
        logger.error(f"Campground creation failed for {user.username}: {e}")
        return fail(request, str(e), "/campgrounds/new")

    if failed:
        flash(request, f"Could not notify {len(failed)} follower(s): {', '.join(failed)}", "error")
    return redirect(f"/campgrounds/{campground.id}")


# NEW - show form to create new campground
@router.get("/new")
def new(
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    auth = require_login(user)
    if isinstance(auth, Denied):
        return deny(request, auth)
    return render(request, db, user, "campgrounds/new.html")


# SHOW - shows more info about one campground
@router.get("/{campground_id}")
def show(
    request: Request,
    campground_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = load_campground(db, campground_id)
    if isinstance(result, Denied):
        logger.warning(f"Campground lookup failed for id {campground_id!r}")
        return deny(request, result)
    return render(request, db, user, "campgrounds/show.html", campground=result.resource)


# EDIT CAMPGROUND ROUTE
@router.get("/{campground_id}/edit")
def edit(
    request: Request,
    campground_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    result = check_campground_ownership(db, user, campground_id)
    if isinstance(result, Denied):
        return deny(request, result)
    return render(request, db, user, "campgrounds/edit.html", campground=result.resource)


# UPDATE CAMPGROUND ROUTE
@router.put("/{campground_id}")
def update(
    request: Request,
    campground_id: str,
    name: str = Form(""),
    price: str = Form(""),
    description: str = Form(""),
    location: str = Form(""),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
    geocoder=Depends(get_geocoder),
    images=Depends(get_image_store),
):
    result = check_campground_ownership(db, user, campground_id)
    if isinstance(result, Denied):
        return deny(request, result)
    campground = result.resource

    try:
        form = parse_form(CampgroundForm, dict(name=name, price=price, description=description, location=location))
        campground_service.update_campground(db, geocoder, images, campground, form, image)
    except YelpCampError as e:
        logger.error(f"Campground {campground.id} update failed: {e}")
        return fail(request, str(e), f"/campgrounds/{campground.id}/edit")

    flash(request, "Successfully Updated!")
    return redirect(f"/campgrounds/{campground.id}")


# DESTROY CAMPGROUND ROUTE
@router.delete("/{campground_id}")
def destroy(
    request: Request,
    campground_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
    images=Depends(get_image_store),
):
    result = check_campground_ownership(db, user, campground_id)
    if isinstance(result, Denied):
        return deny(request, result)
    campground = result.resource
    fallback = f"/campgrounds/{campground.id}"

    try:
        campground_service.delete_campground(db, images, campground)
    except YelpCampError as e:
        logger.error(f"Campground {campground_id} delete failed: {e}")
        return fail(request, str(e), fallback)

    flash(request, "Campground deleted successfully")
    return redirect("/campgrounds")
