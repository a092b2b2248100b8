"""Campground listing, creation, detail, update and delete over HTTP."""
from conftest import campgrounds, post_campground, register, user_by_name

from yelpcamp.db.database import CampgroundDB, CommentDB, NotificationDB, ReviewDB


def test_create_campground_geocodes_and_stores_image(client, db, images):
    register(client, "alice")

    resp = post_campground(client, location="Yosemite")

    stored = campgrounds(db)
    assert len(stored) == 1
    campground = stored[0]
    assert resp.status_code == 303
    assert resp.headers["location"] == f"/campgrounds/{campground.id}"
    assert campground.lat == 37.8651
    assert campground.lng == -119.5383
    assert campground.location == "Yosemite National Park, California, USA"
    assert campground.image_id in images.assets
    assert campground.image.endswith(campground.image_id)
    assert campground.author_username == "alice"
    assert campground.author_id == user_by_name(db, "alice").id


def test_create_with_invalid_address_persists_nothing(client, db, images):
    register(client, "alice")

    resp = post_campground(client, location="Nowhere at all")

    assert resp.status_code == 303
    assert resp.headers["location"] == "/campgrounds/new"
    assert campgrounds(db) == []
    # the uploaded asset is compensated away
    assert images.assets == {}
    assert len(images.destroyed) == 1
    assert "Invalid address" in client.get("/campgrounds").text


def test_create_with_geocoder_outage_reports_invalid_address(client, db, images):
    register(client, "alice")

    resp = post_campground(client, location="Outage")

    assert resp.status_code == 303
    assert campgrounds(db) == []
    assert images.assets == {}
    assert "Invalid address" in client.get("/campgrounds").text


def test_create_rejects_non_image_upload(client, db, images):
    register(client, "alice")

    resp = post_campground(client, filename="notes.pdf")

    assert resp.status_code == 303
    assert campgrounds(db) == []
    assert images.assets == {}
    assert "Only image files are allowed!" in client.get("/campgrounds").text


def test_create_surfaces_image_store_error(client, db, images):
    register(client, "alice")
    images.fail_upload = True

    resp = post_campground(client)

    assert resp.status_code == 303
    assert campgrounds(db) == []
    assert "Upload quota exceeded" in client.get("/campgrounds").text


def test_create_requires_login(client, db):
    resp = post_campground(client)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"
    assert campgrounds(db) == []


def test_new_form_requires_login(make_client):
    anonymous = make_client()
    assert anonymous.get("/campgrounds/new", follow_redirects=False).headers["location"] == "/login"

    alice = make_client()
    register(alice, "alice")
    assert alice.get("/campgrounds/new").status_code == 200


def test_show_renders_campground(client, db):
    register(client, "alice")
    post_campground(client, name="Granite Hill")
    campground = campgrounds(db)[0]

    resp = client.get(f"/campgrounds/{campground.id}")

    assert resp.status_code == 200
    assert "Granite Hill" in resp.text


def test_show_missing_or_malformed_id_redirects_to_listing(client):
    for bad_id in ("999", "not-an-id", "0", "99999999999999999999", str(2**31)):
        resp = client.get(f"/campgrounds/{bad_id}", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/campgrounds"
    assert "does not exist" in client.get("/campgrounds").text


def test_owner_can_update_location_and_fields(client, db, geocoder):
    register(client, "alice")
    post_campground(client, location="Yosemite")
    campground = campgrounds(db)[0]

    resp = client.put(
        f"/campgrounds/{campground.id}",
        data={"name": "Angels Landing", "price": "20", "description": "Steep", "location": "Zion"},
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert resp.headers["location"] == f"/campgrounds/{campground.id}"
    updated = campgrounds(db)[0]
    assert updated.name == "Angels Landing"
    assert updated.location == "Zion National Park, Utah, USA"
    assert updated.lat == 37.2982
    assert geocoder.calls[-1] == "Zion"


def test_update_with_invalid_address_leaves_record_unchanged(client, db):
    register(client, "alice")
    post_campground(client, name="Granite Hill", location="Yosemite")
    campground = campgrounds(db)[0]

    resp = client.put(
        f"/campgrounds/{campground.id}",
        data={"name": "Renamed", "location": "Atlantis"},
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert resp.headers["location"] == f"/campgrounds/{campground.id}/edit"
    unchanged = campgrounds(db)[0]
    assert unchanged.name == "Granite Hill"
    assert unchanged.location == "Yosemite National Park, California, USA"


def test_update_with_new_image_replaces_asset(client, db, images):
    register(client, "alice")
    post_campground(client)
    old = campgrounds(db)[0]
    old_image_id = old.image_id

    resp = client.put(
        f"/campgrounds/{old.id}",
        data={"name": "Granite Hill", "location": "Yosemite"},
        files={"image": ("sunrise.png", b"new bytes", "image/png")},
        follow_redirects=False,
    )

    assert resp.status_code == 303
    updated = campgrounds(db)[0]
    assert updated.image_id != old_image_id
    assert updated.image_id in images.assets
    assert old_image_id not in images.assets
    assert updated.image.endswith(updated.image_id)


def test_update_with_failed_upload_keeps_old_image(client, db, images):
    register(client, "alice")
    post_campground(client)
    old = campgrounds(db)[0]
    old_image_id = old.image_id
    images.fail_upload = True

    client.put(
        f"/campgrounds/{old.id}",
        data={"name": "Renamed", "location": "Zion"},
        files={"image": ("sunrise.png", b"new bytes", "image/png")},
        follow_redirects=False,
    )

    unchanged = campgrounds(db)[0]
    assert unchanged.name == "Granite Hill"
    assert unchanged.image_id == old_image_id
    assert old_image_id in images.assets


def test_non_owner_cannot_update_or_delete(make_client, db, images):
    alice = make_client()
    register(alice, "alice")
    post_campground(alice, name="Granite Hill")
    campground = campgrounds(db)[0]

    bob = make_client()
    register(bob, "bob")
    put = bob.put(
        f"/campgrounds/{campground.id}",
        data={"name": "Hijacked", "location": "Zion"},
        follow_redirects=False,
    )
    delete = bob.delete(f"/campgrounds/{campground.id}", follow_redirects=False)
    edit = bob.get(f"/campgrounds/{campground.id}/edit", follow_redirects=False)

    for resp in (put, delete, edit):
        assert resp.status_code == 303
        assert resp.headers["location"] == f"/campgrounds/{campground.id}"
    remaining = campgrounds(db)
    assert len(remaining) == 1
    assert remaining[0].name == "Granite Hill"
    assert remaining[0].image_id in images.assets


def test_anonymous_mutation_redirects_to_login(make_client, db):
    alice = make_client()
    register(alice, "alice")
    post_campground(alice)
    campground = campgrounds(db)[0]

    anonymous = make_client()
    resp = anonymous.delete(f"/campgrounds/{campground.id}", follow_redirects=False)

    assert resp.headers["location"] == "/login"
    assert len(campgrounds(db)) == 1


def test_delete_cascades_comments_reviews_notifications_and_image(make_client, db, images):
    alice = make_client()
    register(alice, "alice")
    bob = make_client()
    register(bob, "bob")
    bob.post(f"/users/{user_by_name(db, 'alice').id}/follow", follow_redirects=False)

    post_campground(alice)
    campground = campgrounds(db)[0]
    image_id = campground.image_id
    for i in range(3):
        alice.post(f"/campgrounds/{campground.id}/comments", data={"text": f"comment {i}"})
        bob.post(f"/campgrounds/{campground.id}/comments", data={"text": f"reply {i}"})
    bob.post(f"/campgrounds/{campground.id}/reviews", data={"rating": "4", "text": "Nice"})
    db.expire_all()
    assert db.query(CommentDB).filter(CommentDB.campground_id == campground.id).count() == 6
    assert db.query(ReviewDB).filter(ReviewDB.campground_id == campground.id).count() == 1

    resp = alice.delete(f"/campgrounds/{campground.id}", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/campgrounds"
    db.expire_all()
    assert db.query(CampgroundDB).count() == 0
    assert db.query(CommentDB).filter(CommentDB.campground_id == campground.id).count() == 0
    assert db.query(ReviewDB).filter(ReviewDB.campground_id == campground.id).count() == 0
    assert db.query(NotificationDB).count() == 0
    assert image_id not in images.assets
    assert "Campground deleted successfully" in alice.get("/campgrounds").text


def test_delete_aborts_when_image_cannot_be_destroyed(client, db, images):
    register(client, "alice")
    post_campground(client)
    campground = campgrounds(db)[0]
    client.post(f"/campgrounds/{campground.id}/comments", data={"text": "hello"})
    images.fail_destroy = True

    resp = client.delete(f"/campgrounds/{campground.id}", follow_redirects=False)

    assert resp.headers["location"] == f"/campgrounds/{campground.id}"
    assert len(campgrounds(db)) == 1
    assert db.query(CommentDB).count() == 1
    assert campground.image_id in images.assets


def test_form_method_override_reaches_delete_route(client, db):
    register(client, "alice")
    post_campground(client)
    campground = campgrounds(db)[0]

    resp = client.post(f"/campgrounds/{campground.id}?_method=DELETE", follow_redirects=False)

    assert resp.headers["location"] == "/campgrounds"
    assert campgrounds(db) == []
