"""
Configuration Module
------------------
Reads environment variables once at startup into an immutable Settings object
that is passed explicitly to the application factory.
"""
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_DATABASE_URL = "sqlite:///./yelpcamp.db"
DEFAULT_SESSION_SECRET = "This is some text to encode passwords."


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    database_url: str = DEFAULT_DATABASE_URL
    session_secret: str = DEFAULT_SESSION_SECRET
    geocoder_url: str = "https://nominatim.openstreetmap.org/search"
    geocoder_user_agent: str = "YelpCampApp/1.0"
    geocoder_rate_limit_delay: float = 1.1
    s3_bucket: Optional[str] = None
    s3_region: str = "us-east-1"
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        return cls(
            database_url=os.getenv("DATABASEURL") or os.getenv("DB_URL") or DEFAULT_DATABASE_URL,
            session_secret=os.getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET),
            geocoder_url=os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search"),
            geocoder_user_agent=os.getenv("GEOCODER_USER_AGENT", "YelpCampApp/1.0"),
            geocoder_rate_limit_delay=float(os.getenv("GEOCODER_RATE_LIMIT_DELAY", "1.1")),
            s3_bucket=os.getenv("S3_BUCKET"),
            s3_region=os.getenv("S3_REGION", "us-east-1"),
            host=os.getenv("IP", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
