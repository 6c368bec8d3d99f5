import uuid
from datetime import datetime, timedelta, timezone
from unittest import mock

import jwt

from reelreview.core.auth import create_access_token
from reelreview.core.config import get_settings
from reelreview.services import reviews as review_service
from reelreview.services.errors import StorageFailure


def test_search_endpoint(client, movies):
    resp = client.get("/api/movies", params={"genre": "sci-fi", "year": "2010"})
    assert resp.status_code == 200
    body = resp.json()
    assert [m["title"] for m in body] == ["Inception"]
    assert body[0]["genres"] == ["Sci-Fi", "Thriller"]


def test_search_endpoint_treats_empty_year_as_absent(client, movies):
    resp = client.get("/api/movies", params={"query": "", "year": ""})
    assert resp.status_code == 200
    assert len(resp.json()) == 3


def test_search_endpoint_rejects_non_integer_year(client, movies):
    assert client.get("/api/movies", params={"year": "nineties"}).status_code == 422


def test_get_movie(client, movies):
    movie = movies["amelie"]
    resp = client.get(f"/api/movies/{movie.id}")
    assert resp.status_code == 200
    assert resp.json()["poster_url"] == "posters/amelie.jpg"
    assert client.get(f"/api/movies/{uuid.uuid4()}").status_code == 404


def test_add_and_replace_movie_require_auth(client, alice, auth_header):
    payload = {"title": "Heat", "genres": ["Crime"], "release_year": 1995, "actors": ["Al Pacino"]}
    assert client.post("/api/movies", json=payload).status_code in (401, 403)

    created = client.post("/api/movies", json=payload, headers=auth_header(alice.email))
    assert created.status_code == 201
    movie_id = created.json()["id"]

    replaced = client.put(
        f"/api/movies/{movie_id}",
        json={"title": "Heat", "genres": ["Crime", "Drama"], "release_year": 1995},
        headers=auth_header(alice.email),
    )
    assert replaced.status_code == 200
    assert replaced.json()["id"] == movie_id
    assert replaced.json()["genres"] == ["Crime", "Drama"]
    assert replaced.json()["actors"] == []

    missing = client.put(f"/api/movies/{uuid.uuid4()}", json=payload, headers=auth_header(alice.email))
    assert missing.status_code == 404


def test_register_and_login(client):
    payload = {"nickname": "dave", "email": "dave@example.com", "password": "hunter2"}
    resp = client.post("/api/users/register", json=payload)
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "dave@example.com"
    assert "password" not in body and "password_hash" not in body

    dup = client.post("/api/users/register", json=payload)
    assert dup.status_code == 409

    login = client.post("/api/auth/login", json={"email": "dave@example.com", "password": "hunter2"})
    assert login.status_code == 200
    token = login.json()["access_token"]
    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["nickname"] == "dave"

    bad = client.post("/api/auth/login", json={"email": "dave@example.com", "password": "nope"})
    assert bad.status_code == 401


def test_review_lifecycle(client, movies, alice, bob, auth_header):
    movie = movies["matrix"]
    created = client.post(
        f"/api/movies/{movie.id}/reviews",
        json={"rating": 5, "comment": "Classic", "user_id": str(bob.id)},
        headers=auth_header(alice.email),
    )
    assert created.status_code == 201
    review = created.json()
    assert review["user_id"] == str(alice.id)

    listed = client.get(f"/api/movies/{movie.id}/reviews")
    assert [r["id"] for r in listed.json()] == [review["id"]]

    by_user = client.get(f"/api/users/{alice.id}/reviews", headers=auth_header(bob.email))
    assert len(by_user.json()) == 1

    denied = client.delete(f"/api/reviews/{review['id']}", headers=auth_header(bob.email))
    assert denied.status_code == 403

    deleted = client.delete(f"/api/reviews/{review['id']}", headers=auth_header(alice.email))
    assert deleted.status_code == 204

    gone = client.delete(f"/api/reviews/{review['id']}", headers=auth_header(alice.email))
    assert gone.status_code == 404


def test_review_rating_is_validated(client, movies, alice, auth_header):
    resp = client.post(
        f"/api/movies/{movies['matrix'].id}/reviews",
        json={"rating": 9},
        headers=auth_header(alice.email),
    )
    assert resp.status_code == 422


def test_review_for_unknown_identity_is_unauthorized(client, movies, auth_header):
    resp = client.post(
        f"/api/movies/{movies['matrix'].id}/reviews",
        json={"rating": 3},
        headers=auth_header("ghost@example.com"),
    )
    assert resp.status_code == 401


def test_review_for_unknown_movie(client, alice, auth_header):
    resp = client.post(
        f"/api/movies/{uuid.uuid4()}/reviews", json={"rating": 3}, headers=auth_header(alice.email)
    )
    assert resp.status_code == 404


def test_update_my_profile(client, alice, auth_header):
    headers = auth_header(alice.email)
    resp = client.put("/api/users/me", json={"nickname": "", "profile_picture": "p.png"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["nickname"] == "alice"
    assert resp.json()["profile_picture"] == "p.png"

    cleared = client.put("/api/users/me", json={"profile_picture": ""}, headers=headers)
    assert cleared.json()["profile_picture"] == ""


def test_update_other_profile_is_forbidden(client, alice, bob, auth_header):
    resp = client.put(f"/api/users/{alice.id}", json={"nickname": "x"}, headers=auth_header(bob.email))
    assert resp.status_code == 403
    own = client.put(f"/api/users/{bob.id}", json={"nickname": "bobby"}, headers=auth_header(bob.email))
    assert own.status_code == 200
    assert own.json()["nickname"] == "bobby"


def test_me_for_unknown_identity(client, auth_header):
    assert client.get("/api/users/me", headers=auth_header("ghost@example.com")).status_code == 401


def test_expired_and_forged_tokens_are_rejected(client, alice):
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    expired = create_access_token(alice.email, now=past)
    resp = client.get("/api/users/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has expired"

    forged = jwt.encode(
        {"sub": alice.email, "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "some-other-secret-of-sufficient-length",
        algorithm="HS256",
    )
    resp = client.get("/api/users/me", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


def test_token_subject_is_email():
    token = create_access_token("alice@example.com")
    payload = jwt.decode(token, get_settings().jwt_secret, algorithms=["HS256"])
    assert payload["sub"] == "alice@example.com"


def test_storage_failure_maps_to_503(client, movies):
    with mock.patch.object(review_service._reviews, "list_for_movie", side_effect=StorageFailure("down")):
        resp = client.get(f"/api/movies/{movies['matrix'].id}/reviews")
    assert resp.status_code == 503


def test_anonymous_delete_is_rejected(client):
    resp = client.delete(f"/api/reviews/{uuid.uuid4()}")
    assert resp.status_code in (401, 403)


def test_search_endpoint_with_huge_year_returns_empty_list(client, movies):
    resp = client.get("/api/movies", params={"year": "100000000000000000000"})
    assert resp.status_code == 200
    assert resp.json() == []


def test_movie_year_outside_column_range_is_rejected(client, alice, auth_header):
    resp = client.post(
        "/api/movies",
        json={"title": "Far Future", "release_year": 10**20},
        headers=auth_header(alice.email),
    )
    assert resp.status_code == 422
