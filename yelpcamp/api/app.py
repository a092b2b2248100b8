from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware
import logging

from yelpcamp.api import campgrounds, comments, index, reviews
from yelpcamp.api.middleware import MethodOverrideMiddleware
from yelpcamp.config import Settings
from yelpcamp.db.database import create_session_factory, create_tables
from yelpcamp.geocoding.nominatim import NominatimGeocoder
from yelpcamp.images.s3 import S3ImageStore

logger = logging.getLogger(__name__)


def configure_logging(level="INFO"):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()]
    )


def create_app(settings=None, geocoder=None, image_store=None, session_factory=None):
    """Build the application; collaborators default to the ones described by ``settings``."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="YelpCamp",
        description="Campground listings with reviews, comments and follower notifications",
        version="1.0.0"
    )

    SessionLocal = session_factory or create_session_factory(settings.database_url)
    create_tables(SessionLocal.kw["bind"])

    app.state.settings = settings
    app.state.SessionLocal = SessionLocal
    app.state.geocoder = geocoder or NominatimGeocoder(
        base_url=settings.geocoder_url,
        user_agent=settings.geocoder_user_agent,
        rate_limit_delay=settings.geocoder_rate_limit_delay,
    )
    app.state.image_store = image_store or S3ImageStore(settings.s3_bucket, settings.s3_region)

    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)
    app.add_middleware(MethodOverrideMiddleware)

    app.include_router(index.router)
    app.include_router(campgrounds.router)
    app.include_router(comments.router)
    app.include_router(reviews.router)

    logger.info(f"YelpCamp app created (database: {settings.database_url.split('://')[0]})")
    return app
