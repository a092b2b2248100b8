"""Comments and reviews attached to a campground."""
import logging

from sqlalchemy.orm import Session

from yelpcamp.db.database import CampgroundDB, CommentDB, ReviewDB, UserDB
from yelpcamp.errors import NotFound, ValidationFailure
from yelpcamp.models.schemas import CommentForm, ReviewForm
from yelpcamp.services.store import commit, parse_id

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND = "Comment not found"
REVIEW_NOT_FOUND = "Review not found"


def get_comment(db: Session, campground: CampgroundDB, comment_id) -> CommentDB:
    comment = db.get(CommentDB, parse_id(comment_id, COMMENT_NOT_FOUND))
    if comment is None or comment.campground_id != campground.id:
        raise NotFound(COMMENT_NOT_FOUND)
    return comment


def add_comment(db: Session, campground: CampgroundDB, author: UserDB, form: CommentForm) -> CommentDB:
    comment = CommentDB(
        text=form.text,
        author_id=author.id,
        author_username=author.username,
        campground_id=campground.id,
    )
    db.add(comment)
    commit(db)
    return comment


def update_comment(db: Session, comment: CommentDB, form: CommentForm) -> CommentDB:
    comment.text = form.text
    commit(db)
    return comment


def delete_comment(db: Session, comment: CommentDB) -> None:
    db.delete(comment)
    commit(db)


def get_review(db: Session, campground: CampgroundDB, review_id) -> ReviewDB:
    review = db.get(ReviewDB, parse_id(review_id, REVIEW_NOT_FOUND))
    if review is None or review.campground_id != campground.id:
        raise NotFound(REVIEW_NOT_FOUND)
    return review


def add_review(db: Session, campground: CampgroundDB, author: UserDB, form: ReviewForm) -> ReviewDB:
    if campground.author_id == author.id:
        raise ValidationFailure("You cannot review your own campground.")
    existing = (
        db.query(ReviewDB)
        .filter(ReviewDB.campground_id == campground.id, ReviewDB.author_id == author.id)
        .first()
    )
    if existing is not None:
        raise ValidationFailure("You already wrote a review.")
    review = ReviewDB(
        rating=form.rating,
        text=form.text,
        author_id=author.id,
        author_username=author.username,
        campground_id=campground.id,
    )
    db.add(review)
    commit(db)
    logger.info(f"{author.username} reviewed campground {campground.id} ({form.rating}/5)")
    return review


def update_review(db: Session, review: ReviewDB, form: ReviewForm) -> ReviewDB:
    review.rating = form.rating
    review.text = form.text
    commit(db)
    return review


def delete_review(db: Session, review: ReviewDB) -> None:
    db.delete(review)
    commit(db)
