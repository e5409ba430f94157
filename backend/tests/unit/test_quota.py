import pytest

from shortlinks.core import quota
from shortlinks.core.errors import QuotaExceededError, SlugTakenError, UnauthorizedError
from shortlinks.models import AnonymousSession, Link
from shortlinks.services.links import shorten


def test_remaining_never_negative():
    assert quota.remaining_urls(0) == 10
    assert quota.remaining_urls(7) == 3
    assert quota.remaining_urls(12) == 0


def test_first_check_creates_session_record(db_session):
    anonymous_session = quota.check_quota(db_session, "sess-1")
    assert anonymous_session.url_count == 0
    assert db_session.query(AnonymousSession).count() == 1


def test_check_quota_at_limit_raises(db_session):
    db_session.add(AnonymousSession(session_id="full", url_count=10))
    db_session.commit()

    with pytest.raises(QuotaExceededError) as exc_info:
        quota.check_quota(db_session, "full")

    assert exc_info.value.code == "ANONYMOUS_LIMIT_REACHED"


def test_ten_anonymous_links_then_limit(db_session, settings):
    for k in range(1, 11):
        result = shorten(db_session, settings, f"https://example.com/{k}", session_id="sess-2")
        assert result["is_anonymous"] is True
        assert result["remaining_urls"] == 10 - k

    with pytest.raises(QuotaExceededError):
        shorten(db_session, settings, "https://example.com/11", session_id="sess-2")

    assert db_session.query(Link).count() == 10
    assert quota.get_quota_status(db_session, "sess-2") == (10, 0)


def test_failed_allocation_does_not_count(db_session, settings):
    shorten(db_session, settings, "https://example.com", custom_slug="mine", session_id="sess-3")

    with pytest.raises(SlugTakenError):
        shorten(db_session, settings, "https://example.com", custom_slug="mine", session_id="sess-3")

    assert quota.get_quota_status(db_session, "sess-3") == (1, 9)


def test_owner_links_are_unlimited(db_session, settings, owner):
    for k in range(12):
        result = shorten(db_session, settings, f"https://example.com/{k}", owner_id=owner.id)
        assert result["is_anonymous"] is False
        assert result["remaining_urls"] is None

    assert db_session.query(AnonymousSession).count() == 0


def test_anonymous_without_session_is_rejected(db_session, settings):
    with pytest.raises(UnauthorizedError):
        shorten(db_session, settings, "https://example.com")


def test_status_defaults_without_record(db_session):
    assert quota.get_quota_status(db_session, None) == (0, 10)
    assert quota.get_quota_status(db_session, "never-seen") == (0, 10)
    assert db_session.query(AnonymousSession).count() == 0
