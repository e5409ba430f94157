"""
Transport rate limits come from the settings each app was built with.
"""


def shorten(client, k):
    return client.post("/api/urls/shorten", json={"originalUrl": f"https://example.com/{k}"})


def test_shorten_limit_from_app_settings(make_client):
    client = make_client(RATE_LIMIT_ENABLED=True, RATE_LIMIT_SHORTEN="2/minute")

    statuses = [shorten(client, k).status_code for k in range(4)]

    assert statuses == [200, 200, 429, 429]
    # Refused by the limiter, not by the anonymous quota
    assert client.get("/api/session/anonymous").json()["urlCount"] == 2


def test_redirect_limit_from_app_settings(make_client):
    client = make_client(RATE_LIMIT_ENABLED=True, RATE_LIMIT_REDIRECT="1/minute")
    code = shorten(client, 1).json()["shortCode"]

    assert client.get(f"/{code}", follow_redirects=False).status_code == 301
    assert client.get(f"/{code}", follow_redirects=False).status_code == 429


def test_apps_do_not_share_limiter(make_client):
    limited = make_client(RATE_LIMIT_ENABLED=True, RATE_LIMIT_SHORTEN="1/minute")
    unlimited = make_client(RATE_LIMIT_ENABLED=False, RATE_LIMIT_SHORTEN="1/minute")

    assert limited.app.state.limiter is not unlimited.app.state.limiter
    assert limited.app.state.limiter.enabled is True
    assert unlimited.app.state.limiter.enabled is False

    assert [shorten(unlimited, k).status_code for k in range(3)] == [200, 200, 200]
    assert [shorten(limited, k).status_code for k in range(3, 5)] == [200, 429]


def test_limits_off_by_default_in_tests(client):
    assert all(shorten(client, k).status_code == 200 for k in range(5))
