"""
End-to-end tests through the DRF views (SQLite test database).
"""

import uuid

import pytest
from django.db import DatabaseError
from django.db.models import QuerySet

pytestmark = pytest.mark.django_db

SPOT_PAYLOAD = {
    "name": "Le Coffee Lab",
    "address": "12 Rue de la Paix",
    "city": "Paris",
    "country": "France",
    "latitude": 48.8566,
    "longitude": 2.3522,
    "hasWifi": True,
    "hasPower": True,
    "noiseLevel": "MODERATE",
    "priceRange": "CHEAP",
    "type": "CAFE",
}


def create_spot(client, **overrides):
    resp = client.post("/spots", {**SPOT_PAYLOAD, **overrides}, format="json")
    assert resp.status_code == 201, resp.json()
    return resp.json()


def assert_error(resp, status_code, code):
    assert resp.status_code == status_code
    error = resp.json()["error"]
    assert error["code"] == code
    assert error["trace_id"].startswith("req_")
    return error


def test_ping(api):
    resp = api.get("/ping")
    assert resp.status_code == 200
    assert resp.json() == {"pong": True}


def test_create_spot_requires_auth(api):
    resp = api.post("/spots", SPOT_PAYLOAD, format="json")
    assert_error(resp, 401, "UNAUTHORIZED")


def test_create_and_get_spot(as_user, api, alice):
    spot = create_spot(as_user(alice))
    assert spot["createdById"] == str(alice.pk)
    assert spot["createdBy"]["name"] == "Alice Martin"
    assert (spot["averageRating"], spot["reviewCount"]) == (0.0, 0)

    resp = api.get(f"/spots/{spot['id']}")
    assert resp.status_code == 200
    assert resp.json()["type"] == "CAFE"


def test_create_spot_validation(as_user, alice):
    resp = as_user(alice).post("/spots", {**SPOT_PAYLOAD, "latitude": 120}, format="json")
    error = assert_error(resp, 400, "VALIDATION_ERROR")
    assert "latitude" in error["details"]


def test_missing_spot(api):
    assert_error(api.get(f"/spots/{uuid.uuid4()}"), 404, "NOT_FOUND")


def test_search_by_amenities_and_radius(as_user, api, alice):
    client = as_user(alice)
    create_spot(client, name="Paris cafe")
    create_spot(client, name="Paris library", type="LIBRARY", hasWifi=False, latitude=48.86, longitude=2.35)
    create_spot(client, name="Lyon cafe", city="Lyon", latitude=45.764, longitude=4.8357)

    names = lambda resp: {s["name"] for s in resp.json()}  # noqa: E731

    assert names(api.get("/spots")) == {"Paris cafe", "Paris library", "Lyon cafe"}
    assert names(api.get("/spots", {"hasWifi": "true"})) == {"Paris cafe", "Lyon cafe"}
    assert names(api.get("/spots", {"type": "LIBRARY"})) == {"Paris library"}
    near_paris = {"latitude": 48.8566, "longitude": 2.3522, "radius": 10}
    assert names(api.get("/spots", near_paris)) == {"Paris cafe", "Paris library"}
    assert names(api.get("/spots", {**near_paris, "hasWifi": "true"})) == {"Paris cafe"}
    assert names(api.get("/spots", {**near_paris, "radius": 0})) == set()


def test_search_with_partial_geo_is_rejected(api):
    resp = api.get("/spots", {"latitude": 48.8, "longitude": 2.3})
    error = assert_error(resp, 400, "VALIDATION_ERROR")
    assert "geo" in error["details"]


def test_search_with_out_of_range_center_is_rejected(api):
    resp = api.get("/spots", {"latitude": 95, "longitude": 2.3, "radius": 5})
    assert_error(resp, 400, "VALIDATION_ERROR")


def test_spot_owner_only_update_and_delete(as_user, api, alice, bob):
    spot = create_spot(as_user(alice))
    url = f"/spots/{spot['id']}"

    assert_error(as_user(bob).patch(url, {"name": "Hijacked"}, format="json"), 404, "NOT_FOUND")
    assert_error(as_user(bob).delete(url), 404, "NOT_FOUND")

    resp = as_user(alice).patch(url, {"name": "Renamed"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"

    assert as_user(alice).delete(url).status_code == 204
    assert api.get(url).status_code == 404


def test_empty_spot_patch_is_rejected(as_user, alice):
    spot = create_spot(as_user(alice))
    resp = as_user(alice).patch(f"/spots/{spot['id']}", {}, format="json")
    assert_error(resp, 400, "VALIDATION_ERROR")


def test_review_flow_updates_spot_aggregate(as_user, api, alice, bob):
    spot = create_spot(as_user(alice))
    reviews_url = f"/reviews/spots/{spot['id']}"

    resp = as_user(alice).post(reviews_url, {"rating": 5, "comment": "great"}, format="json")
    assert resp.status_code == 201
    alice_review = resp.json()
    assert alice_review["user"]["email"] == "alice@example.com"
    assert as_user(bob).post(reviews_url, {"rating": 4}, format="json").status_code == 201

    detail = api.get(f"/spots/{spot['id']}").json()
    assert (detail["averageRating"], detail["reviewCount"]) == (4.5, 2)

    listed = api.get(reviews_url).json()
    assert {r["rating"] for r in listed} == {5, 4}

    resp = as_user(alice).patch(f"/reviews/{alice_review['id']}", {"rating": 1}, format="json")
    assert resp.status_code == 200
    detail = api.get(f"/spots/{spot['id']}").json()
    assert (detail["averageRating"], detail["reviewCount"]) == (2.5, 2)

    assert as_user(alice).delete(f"/reviews/{alice_review['id']}").status_code == 204
    detail = api.get(f"/spots/{spot['id']}").json()
    assert (detail["averageRating"], detail["reviewCount"]) == (4.0, 1)


def test_duplicate_review_conflicts(as_user, alice):
    spot = create_spot(as_user(alice))
    url = f"/reviews/spots/{spot['id']}"
    as_user(alice).post(url, {"rating": 5}, format="json")
    assert_error(as_user(alice).post(url, {"rating": 3}, format="json"), 409, "CONFLICT")


def test_review_rating_out_of_range(as_user, alice):
    spot = create_spot(as_user(alice))
    resp = as_user(alice).post(f"/reviews/spots/{spot['id']}", {"rating": 6}, format="json")
    assert_error(resp, 400, "VALIDATION_ERROR")


def test_review_for_missing_spot(as_user, alice):
    resp = as_user(alice).post(f"/reviews/spots/{uuid.uuid4()}", {"rating": 3}, format="json")
    assert_error(resp, 404, "NOT_FOUND")


def test_only_author_can_change_review(as_user, alice, bob):
    spot = create_spot(as_user(alice))
    review = as_user(alice).post(f"/reviews/spots/{spot['id']}", {"rating": 5}, format="json").json()
    url = f"/reviews/{review['id']}"

    assert_error(as_user(bob).patch(url, {"rating": 1}, format="json"), 403, "FORBIDDEN")
    assert_error(as_user(bob).delete(url), 403, "FORBIDDEN")
    assert_error(as_user(alice).patch(url, {}, format="json"), 400, "VALIDATION_ERROR")


def test_favorites_flow(as_user, alice, bob):
    spot = create_spot(as_user(alice))
    client = as_user(bob)

    resp = client.post("/favorites", {"spotId": spot["id"]}, format="json")
    assert resp.status_code == 201
    favorite = resp.json()
    assert favorite["spot"]["name"] == "Le Coffee Lab"

    assert_error(client.post("/favorites", {"spotId": spot["id"]}, format="json"), 409, "CONFLICT")
    assert client.get(f"/favorites/check/{spot['id']}").json() == {"isFavorite": True}
    assert as_user(alice).get(f"/favorites/check/{spot['id']}").json() == {"isFavorite": False}
    assert [f["spotId"] for f in client.get("/favorites").json()] == [spot["id"]]

    assert_error(as_user(alice).delete(f"/favorites/{favorite['id']}"), 404, "NOT_FOUND")
    assert client.delete(f"/favorites/{favorite['id']}").status_code == 204
    assert client.get("/favorites").json() == []


def test_favorites_require_auth(api):
    assert_error(api.get("/favorites"), 401, "UNAUTHORIZED")


def test_my_stats_and_spots(as_user, alice, bob):
    mine = create_spot(as_user(alice), name="Mine")
    theirs = create_spot(as_user(bob), name="Theirs")
    client = as_user(alice)
    client.post(f"/reviews/spots/{theirs['id']}", {"rating": 4}, format="json")
    client.post("/favorites", {"spotId": theirs["id"]}, format="json")
    client.post("/favorites", {"spotId": mine["id"]}, format="json")

    assert client.get("/users/me/stats").json() == {"spotsCreated": 1, "reviewsWritten": 1, "favoriteSpots": 2}
    assert [s["name"] for s in client.get("/users/me/spots").json()] == ["Mine"]


def test_deleting_spot_removes_its_reviews_and_favorites(as_user, api, alice, bob):
    spot = create_spot(as_user(alice))
    as_user(bob).post(f"/reviews/spots/{spot['id']}", {"rating": 4}, format="json")
    as_user(bob).post("/favorites", {"spotId": spot["id"]}, format="json")

    assert as_user(alice).delete(f"/spots/{spot['id']}").status_code == 204
    assert as_user(bob).get("/users/me/stats").json() == {"spotsCreated": 0, "reviewsWritten": 0, "favoriteSpots": 0}


def test_token_endpoint_issues_jwt(api, alice):
    resp = api.post("/auth/token", {"username": "alice", "password": "pw"}, format="json")
    assert resp.status_code == 200
    token = resp.json()["access"]

    api.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    assert api.get("/users/me/stats").status_code == 200


def test_spot_detail_includes_reviews(as_user, api, alice, bob):
    spot = create_spot(as_user(alice))
    as_user(alice).post(f"/reviews/spots/{spot['id']}", {"rating": 5, "comment": "bright"}, format="json")
    as_user(bob).post(f"/reviews/spots/{spot['id']}", {"rating": 3}, format="json")

    detail = api.get(f"/spots/{spot['id']}").json()
    assert {r["rating"] for r in detail["reviews"]} == {5, 3}
    authors = {r["user"]["email"] for r in detail["reviews"]}
    assert authors == {"alice@example.com", "bob@example.com"}


def test_spot_detail_without_reviews(as_user, api, alice):
    spot = create_spot(as_user(alice))
    assert api.get(f"/spots/{spot['id']}").json()["reviews"] == []


def test_validation_message_is_japanese(as_user, alice):
    resp = as_user(alice).post("/spots", {"name": "only a name"}, format="json")
    error = assert_error(resp, 400, "VALIDATION_ERROR")
    assert error["message"] == "入力内容に誤りがあります"


def test_storage_failure_renders_500(api, monkeypatch):
    def broken(self, *fields):
        raise DatabaseError("connection lost")

    monkeypatch.setattr(QuerySet, "order_by", broken)
    resp = api.get("/spots")
    error = assert_error(resp, 500, "STORAGE_ERROR")
    assert "spot find" in error["message"]
