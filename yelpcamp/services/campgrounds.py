"""Campground workflows.

Creation, update and deletion each touch the document store and the image
store, which share no transaction. They are written as explicit step sequences
with a compensating action for every step that can leave an orphan:

- create: upload -> geocode -> insert -> fan-out. A failed geocode or insert
  destroys the freshly uploaded asset.
- update: geocode -> upload new -> commit -> destroy old. A failed commit
  destroys the new asset; a failed destroy of the old asset only leaves an
  unreferenced asset behind and is logged.
- delete: bulk delete rows (uncommitted) -> destroy asset -> commit. A failed
  destroy rolls the rows back so nothing is deleted.

Update and delete are safe to retry from the start; a retried create may
leave a duplicate listing.
"""
import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yelpcamp.db.database import (
    CampgroundDB, CommentDB, NotificationDB, ReviewDB, UserDB,
)
from yelpcamp.errors import ExternalServiceFailure, NotFound, ValidationFailure
from yelpcamp.images.s3 import check_image_filename
from yelpcamp.models.schemas import CampgroundForm, CampgroundPage
from yelpcamp.services.notifications import notify_followers
from yelpcamp.services.store import commit, parse_id

logger = logging.getLogger(__name__)

PAGE_SIZE = 8
# largest page whose offset still fits a signed 64-bit OFFSET
MAX_PAGE = 2**63 // PAGE_SIZE
LIKE_ESCAPE = "\\"
NOT_FOUND_MESSAGE = "Sorry, that campground does not exist!"


def parse_page(value) -> int:
    try:
        page = int(str(value))
    except (TypeError, ValueError):
        return 1
    return page if 1 <= page <= MAX_PAGE else 1


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user text only matches literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def list_campgrounds(db: Session, search: Optional[str] = None, page=1) -> CampgroundPage:
    if search:
        pattern = f"%{escape_like(search)}%"
        campgrounds = (
            db.query(CampgroundDB)
            .filter(CampgroundDB.name.ilike(pattern, escape=LIKE_ESCAPE))
            .order_by(CampgroundDB.id)
            .all()
        )
        return CampgroundPage(campgrounds=campgrounds, search=search)

    page = parse_page(page)
    count = db.query(CampgroundDB).count()
    campgrounds = (
        db.query(CampgroundDB)
        .order_by(CampgroundDB.id)
        .offset(PAGE_SIZE * (page - 1))
        .limit(PAGE_SIZE)
        .all()
    )
    return CampgroundPage(campgrounds=campgrounds, current=page, pages=math.ceil(count / PAGE_SIZE))


def get_campground(db: Session, campground_id) -> CampgroundDB:
    campground = db.get(CampgroundDB, parse_id(campground_id, NOT_FOUND_MESSAGE))
    if campground is None:
        raise NotFound(NOT_FOUND_MESSAGE)
    return campground


def _geocode(geocoder, location):
    try:
        result = geocoder.geocode(location)
    except ExternalServiceFailure as e:
        logger.error(f"Geocoder error for '{location}': {e}")
        result = None
    if result is None:
        raise ValidationFailure("Invalid address")
    return result


def _discard_image(images, image_id):
    try:
        images.destroy(image_id)
    except ExternalServiceFailure as e:
        logger.error(f"Could not remove orphaned image {image_id}: {e}")


def _has_file(image) -> bool:
    return image is not None and bool(getattr(image, "filename", None))


def create_campground(db: Session, geocoder, images, author: UserDB,
                      form: CampgroundForm, image) -> Tuple[CampgroundDB, List[str]]:
    """Returns the new campground and the followers that could not be notified."""
    if not _has_file(image):
        raise ValidationFailure("Please choose an image to upload")
    check_image_filename(image.filename)

    stored = images.upload(image.file, image.filename, image.content_type)

    try:
        geo = _geocode(geocoder, form.location)
    except ValidationFailure:
        _discard_image(images, stored.image_id)
        raise

    campground = CampgroundDB(
        name=form.name,
        price=form.price,
        description=form.description,
        image=stored.url,
        image_id=stored.image_id,
        location=geo.formatted_address,
        lat=geo.latitude,
        lng=geo.longitude,
        author_id=author.id,
        author_username=author.username,
    )
    db.add(campground)
    try:
        commit(db)
    except ExternalServiceFailure:
        _discard_image(images, stored.image_id)
        raise
    logger.info(f"Campground {campground.id} created by {author.username}")

    failed = notify_followers(db, author, campground)
    return campground, failed


def update_campground(db: Session, geocoder, images, campground: CampgroundDB,
                      form: CampgroundForm, image=None) -> CampgroundDB:
    geo = _geocode(geocoder, form.location)

    stored = None
    if _has_file(image):
        check_image_filename(image.filename)
        stored = images.upload(image.file, image.filename, image.content_type)

    old_image_id = campground.image_id
    campground.name = form.name
    campground.price = form.price
    campground.description = form.description
    campground.location = geo.formatted_address
    campground.lat = geo.latitude
    campground.lng = geo.longitude
    if stored is not None:
        campground.image = stored.url
        campground.image_id = stored.image_id
    try:
        commit(db)
    except ExternalServiceFailure:
        if stored is not None:
            _discard_image(images, stored.image_id)
        raise

    if stored is not None and old_image_id:
        _discard_image(images, old_image_id)
    logger.info(f"Campground {campground.id} updated")
    return campground


def delete_campground(db: Session, images, campground: CampgroundDB) -> None:
    campground_id = campground.id
    image_id = campground.image_id
    try:
        db.query(CommentDB).filter(CommentDB.campground_id == campground_id).delete(synchronize_session=False)
        db.query(ReviewDB).filter(ReviewDB.campground_id == campground_id).delete(synchronize_session=False)
        db.query(NotificationDB).filter(NotificationDB.campground_id == campground_id).delete(synchronize_session=False)
        db.query(CampgroundDB).filter(CampgroundDB.id == campground_id).delete(synchronize_session=False)
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete campground {campground_id}: {e}")
        raise ExternalServiceFailure(str(e)) from e

    try:
        images.destroy(image_id)
    except ExternalServiceFailure:
        db.rollback()
        raise

    commit(db)
    logger.info(f"Campground {campground_id} deleted with its comments and reviews")
