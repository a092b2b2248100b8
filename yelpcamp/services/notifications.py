import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yelpcamp.db.database import CampgroundDB, NotificationDB, UserDB
from yelpcamp.errors import NotFound, Unauthorized
from yelpcamp.services.store import commit

logger = logging.getLogger(__name__)


def notify_followers(db: Session, author: UserDB, campground: CampgroundDB) -> List[str]:
    """Push one unread notification to every follower of ``author``.

    Each follower is committed on its own so one failed save does not undo the
    others or the campground. Returns the usernames that could not be notified.
    """
    campground_id = campground.id
    author_id = author.id
    username = author.username
    followers = [(f.id, f.username) for f in author.followers if f.id != author_id]

    failed = []
    for follower_id, follower_username in followers:
        try:
            follower = db.get(UserDB, follower_id)
            follower.notifications.append(
                NotificationDB(username=username, campground_id=campground_id, is_read=False)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to notify {follower_username} about campground {campground_id}: {e}")
            failed.append(follower_username)

    logger.info(f"Notified {len(followers) - len(failed)}/{len(followers)} followers of {username}")
    return failed


def unread_notifications(db: Session, user: UserDB) -> List[NotificationDB]:
    return (
        db.query(NotificationDB)
        .filter(NotificationDB.user_id == user.id, NotificationDB.is_read.is_(False))
        .order_by(NotificationDB.id.desc())
        .all()
    )


def all_notifications(db: Session, user: UserDB) -> List[NotificationDB]:
    return (
        db.query(NotificationDB)
        .filter(NotificationDB.user_id == user.id)
        .order_by(NotificationDB.id.desc())
        .all()
    )


def open_notification(db: Session, user: UserDB, notification_id: int) -> NotificationDB:
    notification = db.get(NotificationDB, notification_id)
    if notification is None:
        raise NotFound("Notification not found")
    if notification.user_id != user.id:
        raise Unauthorized("You don't have permission to do that")
    notification.is_read = True
    commit(db)
    return notification
