"""Shared fixtures: an in-memory store and in-process geocoder/image store fakes."""
import pytest
from fastapi.testclient import TestClient

from yelpcamp.api.app import create_app
from yelpcamp.config import Settings
from yelpcamp.db.database import CampgroundDB, UserDB
from yelpcamp.errors import ExternalServiceFailure
from yelpcamp.geocoding.nominatim import GeocodeResult
from yelpcamp.images.s3 import StoredImage, check_image_filename

KNOWN_ADDRESSES = {
    "yosemite": GeocodeResult(37.8651, -119.5383, "Yosemite National Park, California, USA"),
    "zion": GeocodeResult(37.2982, -113.0263, "Zion National Park, Utah, USA"),
}


class FakeGeocoder:
    def __init__(self):
        self.calls = []

    def geocode(self, address):
        self.calls.append(address)
        if (address or "").strip().lower() == "outage":
            raise ExternalServiceFailure("Geocoding service unavailable after 3 attempts")
        return KNOWN_ADDRESSES.get((address or "").strip().lower())


class FakeImageStore:
    def __init__(self):
        self.assets = {}
        self.destroyed = []
        self.fail_upload = False
        self.fail_destroy = False
        self._counter = 0

    def upload(self, fileobj, filename, content_type=None):
        check_image_filename(filename)
        if self.fail_upload:
            raise ExternalServiceFailure("Upload quota exceeded")
        self._counter += 1
        image_id = f"campgrounds/{self._counter}-{filename}"
        self.assets[image_id] = fileobj.read()
        return StoredImage(url=f"https://images.test/{image_id}", image_id=image_id)

    def destroy(self, image_id):
        if self.fail_destroy:
            raise ExternalServiceFailure("Asset store unavailable")
        self.assets.pop(image_id, None)
        self.destroyed.append(image_id)


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def images():
    return FakeImageStore()


@pytest.fixture
def app(geocoder, images):
    settings = Settings(database_url="sqlite://", session_secret="test-secret")
    return create_app(settings, geocoder=geocoder, image_store=images)


@pytest.fixture
def db(app):
    session = app.state.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_client(app):
    """Each client keeps its own cookie jar, i.e. its own login session."""
    def _make():
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


def register(client, username, password="password123", **extra):
    data = {"username": username, "password": password}
    data.update(extra)
    return client.post("/register", data=data, follow_redirects=False)


def post_campground(client, name="Granite Hill", location="Yosemite", filename="tent.jpg", **fields):
    data = {"name": name, "price": "12.50", "description": "A quiet spot", "location": location}
    data.update(fields)
    files = {"image": (filename, b"fake image bytes", "image/jpeg")}
    return client.post("/campgrounds", data=data, files=files, follow_redirects=False)


def user_by_name(db, username):
    db.expire_all()
    return db.query(UserDB).filter(UserDB.username == username).one()


def campgrounds(db):
    db.expire_all()
    return db.query(CampgroundDB).order_by(CampgroundDB.id).all()
