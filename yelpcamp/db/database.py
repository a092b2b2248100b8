from datetime import datetime, timezone
import logging

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Table, Text,
    create_engine, desc,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

# Get logger
logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


# Unidirectional "follows" edge: follower_id follows user_id
user_followers = Table(
    "user_followers",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("follower_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class UserDB(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    email = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    followers = relationship(
        "UserDB",
        secondary=user_followers,
        primaryjoin=lambda: UserDB.id == user_followers.c.user_id,
        secondaryjoin=lambda: UserDB.id == user_followers.c.follower_id,
        backref="following",
    )
    notifications = relationship(
        "NotificationDB",
        order_by="NotificationDB.id",
        passive_deletes=True,
    )


# Define the Campground table structure
class CampgroundDB(Base):
    __tablename__ = "campgrounds"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    price = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    image = Column(String, nullable=True)  # public URL of the stored asset
    image_id = Column(String, nullable=True)  # asset key, set iff image is set
    location = Column(String, nullable=True)  # formatted address from the geocoder
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    author_username = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    comments = relationship(
        "CommentDB",
        order_by="CommentDB.id",
        passive_deletes=True,
    )
    reviews = relationship(
        "ReviewDB",
        order_by=lambda: [desc(ReviewDB.created_at), desc(ReviewDB.id)],
        passive_deletes=True,
    )

    @property
    def rating(self):
        if not self.reviews:
            return 0
        return sum(review.rating for review in self.reviews) / len(self.reviews)


class CommentDB(Base):
    __tablename__ = "comments"
    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    author_username = Column(String, nullable=False)
    campground_id = Column(Integer, ForeignKey("campgrounds.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)


class ReviewDB(Base):
    __tablename__ = "reviews"
    id = Column(Integer, primary_key=True, index=True)
    rating = Column(Integer, nullable=False)
    text = Column(Text, nullable=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    author_username = Column(String, nullable=False)
    campground_id = Column(Integer, ForeignKey("campgrounds.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)


class NotificationDB(Base):
    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False)  # the user who acted
    campground_id = Column(Integer, ForeignKey("campgrounds.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)


def create_session_factory(database_url):
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, **kwargs)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine):
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created (if they didn't exist previously).")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise
