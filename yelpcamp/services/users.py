import logging

from sqlalchemy.orm import Session

from yelpcamp.auth.session import hash_password
from yelpcamp.db.database import CampgroundDB, UserDB
from yelpcamp.errors import NotFound, ValidationFailure
from yelpcamp.models.schemas import RegistrationForm
from yelpcamp.services.store import commit, parse_id

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "That user does not exist"


def register_user(db: Session, form: RegistrationForm) -> UserDB:
    if db.query(UserDB).filter(UserDB.username == form.username).first() is not None:
        raise ValidationFailure("A user with the given username is already registered")
    user = UserDB(
        username=form.username,
        password_hash=hash_password(form.password),
        email=form.email,
        first_name=form.first_name,
        last_name=form.last_name,
        avatar=form.avatar,
    )
    db.add(user)
    commit(db)
    logger.info(f"Registered user {user.username}")
    return user


def get_user(db: Session, user_id) -> UserDB:
    user = db.get(UserDB, parse_id(user_id, USER_NOT_FOUND))
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return user


def user_campgrounds(db: Session, user: UserDB):
    return (
        db.query(CampgroundDB)
        .filter(CampgroundDB.author_id == user.id)
        .order_by(CampgroundDB.id)
        .all()
    )


def follow(db: Session, follower: UserDB, user: UserDB) -> bool:
    """Make ``follower`` follow ``user``. Returns False if the edge already existed."""
    if follower.id == user.id:
        raise ValidationFailure("You cannot follow yourself")
    if follower in user.followers:
        return False
    user.followers.append(follower)
    commit(db)
    logger.info(f"{follower.username} now follows {user.username}")
    return True


def unfollow(db: Session, follower: UserDB, user: UserDB) -> bool:
    if follower not in user.followers:
        return False
    user.followers.remove(follower)
    commit(db)
    logger.info(f"{follower.username} unfollowed {user.username}")
    return True
