"""The Nominatim geocoder and the S3 image store against stubbed transports."""
import io

import pytest
import requests
from botocore.exceptions import ClientError

from yelpcamp.errors import ExternalServiceFailure, ValidationFailure
from yelpcamp.geocoding import nominatim
from yelpcamp.geocoding.nominatim import NominatimGeocoder
from yelpcamp.images.s3 import S3ImageStore, make_image_key


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(nominatim.time, "sleep", lambda _seconds: None)


def stub_get(monkeypatch, responses):
    calls = []

    def _get(url, params=None, headers=None, timeout=None):
        calls.append(params)
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(nominatim.requests, "get", _get)
    return calls


def test_geocode_returns_first_match(monkeypatch):
    calls = stub_get(monkeypatch, [FakeResponse(200, [
        {"lat": "37.8651", "lon": "-119.5383", "display_name": "Yosemite Valley, CA, USA"},
    ])])

    result = NominatimGeocoder(rate_limit_delay=0).geocode("Yosemite")

    assert result.latitude == 37.8651
    assert result.longitude == -119.5383
    assert result.formatted_address == "Yosemite Valley, CA, USA"
    assert calls[0]["q"] == "Yosemite"
    assert calls[0]["limit"] == 1


def test_geocode_empty_result_is_none(monkeypatch):
    stub_get(monkeypatch, [FakeResponse(200, [])])

    assert NominatimGeocoder(rate_limit_delay=0).geocode("asdfghjkl") is None


def test_geocode_blank_address_skips_request(monkeypatch):
    calls = stub_get(monkeypatch, [])

    assert NominatimGeocoder(rate_limit_delay=0).geocode("   ") is None
    assert calls == []


def test_geocode_caches_results(monkeypatch):
    calls = stub_get(monkeypatch, [FakeResponse(200, [
        {"lat": "1.5", "lon": "2.5", "display_name": "Somewhere"},
    ])])
    geocoder = NominatimGeocoder(rate_limit_delay=0)

    first = geocoder.geocode("Somewhere")
    second = geocoder.geocode("  somewhere ")

    assert first == second
    assert len(calls) == 1


def test_geocode_retries_server_and_network_errors(monkeypatch):
    calls = stub_get(monkeypatch, [
        FakeResponse(503),
        requests.ConnectionError("reset"),
        FakeResponse(200, [{"lat": "1", "lon": "2", "display_name": "Third time lucky"}]),
    ])

    result = NominatimGeocoder(rate_limit_delay=0).geocode("Lucky")

    assert result.formatted_address == "Third time lucky"
    assert len(calls) == 3


def test_geocode_raises_after_max_retries(monkeypatch):
    calls = stub_get(monkeypatch, [FakeResponse(500), FakeResponse(500), FakeResponse(500)])

    with pytest.raises(ExternalServiceFailure, match="unavailable"):
        NominatimGeocoder(rate_limit_delay=0).geocode("Down")
    assert len(calls) == 3


def test_geocode_cache_evicts_least_recently_used(monkeypatch):
    calls = stub_get(monkeypatch, [
        FakeResponse(200, [{"lat": "1", "lon": "1", "display_name": "A"}]),
        FakeResponse(200, [{"lat": "2", "lon": "2", "display_name": "B"}]),
        FakeResponse(200, [{"lat": "3", "lon": "3", "display_name": "C"}]),
        FakeResponse(200, [{"lat": "2", "lon": "2", "display_name": "B again"}]),
    ])
    geocoder = NominatimGeocoder(rate_limit_delay=0, cache_size=2)

    geocoder.geocode("a")
    geocoder.geocode("b")
    geocoder.geocode("a")
    geocoder.geocode("c")

    assert list(geocoder._cache) == ["a", "c"]
    assert geocoder.geocode("b").formatted_address == "B again"
    assert len(calls) == 4


def test_geocode_client_error_is_not_retried(monkeypatch):
    calls = stub_get(monkeypatch, [FakeResponse(403)])

    assert NominatimGeocoder(rate_limit_delay=0).geocode("Forbidden") is None
    assert len(calls) == 1


class StubS3:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploaded = []
        self.deleted = []

    def _maybe_fail(self, operation):
        if self.fail:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, operation)

    def upload_fileobj(self, Fileobj, Bucket, Key, ExtraArgs=None):
        self._maybe_fail("PutObject")
        self.uploaded.append((Bucket, Key, Fileobj.read(), ExtraArgs))

    def delete_object(self, Bucket, Key):
        self._maybe_fail("DeleteObject")
        self.deleted.append((Bucket, Key))


def test_image_key_is_slugified_and_keeps_extension():
    key = make_image_key("My Tent Photo!.JPG")
    assert key.startswith("campgrounds/")
    assert key.endswith("-my-tent-photo.jpg")


def test_upload_returns_public_url_and_key():
    client = StubS3()
    store = S3ImageStore("yelpcamp-images", client=client)

    stored = store.upload(io.BytesIO(b"png bytes"), "lake.png")

    bucket, key, body, extra = client.uploaded[0]
    assert bucket == "yelpcamp-images"
    assert body == b"png bytes"
    assert extra == {"ContentType": "image/png"}
    assert stored.image_id == key
    assert stored.url == f"https://yelpcamp-images.s3.amazonaws.com/{key}"


def test_upload_rejects_non_images_before_calling_s3():
    client = StubS3()
    store = S3ImageStore("yelpcamp-images", client=client)

    with pytest.raises(ValidationFailure):
        store.upload(io.BytesIO(b"%PDF"), "brochure.pdf")
    assert client.uploaded == []


def test_s3_errors_become_external_service_failures():
    store = S3ImageStore("yelpcamp-images", client=StubS3(fail=True))

    with pytest.raises(ExternalServiceFailure, match="Access Denied"):
        store.upload(io.BytesIO(b"gif"), "a.gif")
    with pytest.raises(ExternalServiceFailure):
        store.destroy("campgrounds/1-a.gif")


def test_destroy_deletes_object_and_ignores_empty_id():
    client = StubS3()
    store = S3ImageStore("yelpcamp-images", client=client)

    store.destroy("campgrounds/1-a.gif")
    store.destroy(None)

    assert client.deleted == [("yelpcamp-images", "campgrounds/1-a.gif")]
