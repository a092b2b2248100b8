"""Landing page, registration/login, user profiles, following and notifications."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session

from yelpcamp.api.permissions import Denied, require_login
from yelpcamp.api.web import deny, fail, get_current_user, get_db, redirect, redirect_back, render
from yelpcamp.auth.session import authenticate, flash, login_user, logout_user
from yelpcamp.db.database import UserDB
from yelpcamp.errors import NotFound, YelpCampError
from yelpcamp.models.schemas import RegistrationForm, parse_form
from yelpcamp.services import notifications as notification_service
from yelpcamp.services import users as user_service
from yelpcamp.services.store import parse_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
def landing(
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    return render(request, db, user, "landing.html")


@router.get("/register")
def register_form(
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    return render(request, db, user, "register.html", page="register")


@router.post("/register")
def register(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    email: str = Form(""),
    first_name: str = Form(""),
    last_name: str = Form(""),
    avatar: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        form = parse_form(RegistrationForm, dict(
            username=username, password=password, email=email,
            first_name=first_name, last_name=last_name, avatar=avatar,
        ))
        user = user_service.register_user(db, form)
    except YelpCampError as e:
        return fail(request, str(e), "/register")

    login_user(request, user)
    flash(request, f"Welcome to YelpCamp {user.username}")
    return redirect("/campgrounds")


@router.get("/login")
def login_form(
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    return render(request, db, user, "login.html", page="login")


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    user = authenticate(db, username.strip(), password)
    if user is None:
        logger.warning(f"Failed login for {username!r}")
        flash(request, "Invalid username or password", "error")
        return redirect("/login")
    login_user(request, user)
    flash(request, f"Welcome back {user.username}")
    return redirect("/campgrounds")


@router.get("/logout")
def logout(request: Request):
    logout_user(request)
    flash(request, "Logged you out!")
    return redirect("/campgrounds")


# USER PROFILE
@router.get("/users/{user_id}")
def profile(
    request: Request,
    user_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    try:
        found = user_service.get_user(db, user_id)
    except NotFound as e:
        flash(request, str(e), "error")
        return redirect("/campgrounds")
    campgrounds = user_service.user_campgrounds(db, found)
    return render(request, db, user, "users/show.html", user=found, campgrounds=campgrounds)


@router.post("/users/{user_id}/follow")
def follow(
    request: Request,
    user_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    auth = require_login(user)
    if isinstance(auth, Denied):
        return deny(request, auth)
    try:
        target = user_service.get_user(db, user_id)
        user_service.follow(db, user, target)
    except YelpCampError as e:
        return fail(request, str(e), "/campgrounds")
    flash(request, f"Successfully followed {target.username}!")
    return redirect_back(request, f"/users/{target.id}")


@router.post("/users/{user_id}/unfollow")
def unfollow(
    request: Request,
    user_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    auth = require_login(user)
    if isinstance(auth, Denied):
        return deny(request, auth)
    try:
        target = user_service.get_user(db, user_id)
        user_service.unfollow(db, user, target)
    except YelpCampError as e:
        return fail(request, str(e), "/campgrounds")
    flash(request, f"You no longer follow {target.username}")
    return redirect_back(request, f"/users/{target.id}")


# VIEW ALL NOTIFICATIONS
@router.get("/notifications")
def notifications(
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    auth = require_login(user)
    if isinstance(auth, Denied):
        return deny(request, auth)
    all_notifications = notification_service.all_notifications(db, user)
    return render(request, db, user, "notifications/index.html", all_notifications=all_notifications)


# HANDLE NOTIFICATION
@router.get("/notifications/{notification_id}")
def open_notification(
    request: Request,
    notification_id: str,
    db: Session = Depends(get_db),
    user: Optional[UserDB] = Depends(get_current_user),
):
    auth = require_login(user)
    if isinstance(auth, Denied):
        return deny(request, auth)
    try:
        notification = notification_service.open_notification(
            db, user, parse_id(notification_id, "Notification not found")
        )
    except YelpCampError as e:
        return fail(request, str(e), "/notifications")
    return redirect(f"/campgrounds/{notification.campground_id}")
