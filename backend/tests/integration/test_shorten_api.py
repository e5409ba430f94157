"""
Shortening over HTTP: anonymous quota, custom slugs and error payloads.
"""

import re

from shortlinks.models import AnonymousSession, Link
from shortlinks.services import analytics


def shorten(client, url="example.com/page", headers=None, **extra):
    return client.post("/api/urls/shorten", json={"originalUrl": url, **extra}, headers=headers)


def test_anonymous_shorten_redirect_and_count(client, db):
    response = shorten(client)

    assert response.status_code == 200
    body = response.json()
    assert re.fullmatch(r"[A-Za-z0-9]{6}", body["shortCode"])
    assert body["isAnonymous"] is True
    assert body["remainingUrls"] == 9
    assert body["originalUrl"] == "https://example.com/page"
    assert body["shortUrl"] == f"https://sho.rt/{body['shortCode']}"

    redirect = client.get(f"/{body['shortCode']}", follow_redirects=False)

    assert redirect.status_code == 301
    assert redirect.headers["location"] == "https://example.com/page"
    assert analytics.analyze(db, body["id"])["total_clicks"] == 1


def test_eleventh_anonymous_request_is_refused(client, db):
    for k in range(1, 11):
        response = shorten(client, f"https://example.com/{k}")
        assert response.status_code == 200
        assert response.json()["remainingUrls"] == 10 - k

    response = shorten(client, "https://example.com/11")

    assert response.status_code == 429
    assert response.json()["code"] == "ANONYMOUS_LIMIT_REACHED"
    assert db.query(Link).count() == 10


def test_new_browser_session_gets_fresh_quota(client):
    for k in range(3):
        shorten(client, f"https://example.com/{k}")

    client.cookies.clear()

    assert shorten(client).json()["remainingUrls"] == 9


def test_quota_status_endpoint(client, db):
    assert client.get("/api/session/anonymous").json() == {"urlCount": 0, "remainingUrls": 10}
    assert db.query(AnonymousSession).count() == 0

    for k in range(3):
        shorten(client, f"https://example.com/{k}")

    assert client.get("/api/session/anonymous").json() == {"urlCount": 3, "remainingUrls": 7}


def test_custom_slug(client):
    response = shorten(client, "https://example.com", customSlug="launch-2024")

    assert response.status_code == 200
    assert response.json()["shortCode"] == "launch-2024"
    assert response.json()["shortUrl"] == "https://sho.rt/launch-2024"


def test_reserved_slug(client, db):
    response = shorten(client, "https://example.com", customSlug="Admin")

    assert response.status_code == 400
    assert response.json()["code"] == "RESERVED_SLUG"
    assert db.query(Link).count() == 0
    assert client.get("/api/session/anonymous").json()["urlCount"] == 0


def test_taken_slug(client):
    assert shorten(client, "https://one.example", customSlug="promo").status_code == 200

    response = shorten(client, "https://two.example", customSlug="promo")

    assert response.status_code == 409
    assert response.json() == {
        "message": "This custom URL is already taken. Please choose a different one.",
        "code": "SLUG_TAKEN",
    }


def test_invalid_slug_characters(client):
    response = shorten(client, "https://example.com", customSlug="has space")

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["errors"]


def test_invalid_url(client):
    response = shorten(client, "https://not a domain")

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"][0]["field"] == "originalUrl"


def test_missing_url(client):
    response = client.post("/api/urls/shorten", json={})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_owner_shorten_skips_quota(client, auth_headers):
    for k in range(11):
        response = shorten(client, f"https://example.com/{k}", headers=auth_headers)
        assert response.status_code == 200

    body = response.json()
    assert body["isAnonymous"] is False
    assert "remainingUrls" not in body


def test_invalid_token_falls_back_to_anonymous(client):
    response = shorten(client, headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 200
    assert response.json()["isAnonymous"] is True


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
