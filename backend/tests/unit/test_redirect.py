import pytest

from shortlinks.core.errors import NotFoundError
from shortlinks.core.shortener import allocate
from shortlinks.models import Click
from shortlinks.services.clicks import ClickRecorder
from shortlinks.services.redirect import resolve, resolve_and_track
from shortlinks.utils.geo import GeoData


@pytest.fixture
def recorder(session_factory):
    return ClickRecorder(session_factory, lambda ip: GeoData())


def test_resolve_active_link(db_session):
    allocate(db_session, "https://example.com/page", custom_slug="Page")
    assert resolve(db_session, "Page").original_url == "https://example.com/page"


@pytest.mark.parametrize("code", ["missing", "page", "bad code", "x" * 51])
def test_resolve_unknown_codes(db_session, code):
    allocate(db_session, "https://example.com/page", custom_slug="Page")
    with pytest.raises(NotFoundError):
        resolve(db_session, code)


def test_resolve_disabled_link(db_session):
    link = allocate(db_session, "https://example.com", custom_slug="off")
    link.is_active = False
    db_session.commit()

    with pytest.raises(NotFoundError):
        resolve(db_session, "off")


def test_click_is_handed_to_scheduler(db_session, recorder):
    link = allocate(db_session, "https://example.com", custom_slug="track")
    scheduled = []

    target = resolve_and_track(
        db_session, "track", recorder,
        lambda func, *args: scheduled.append((func, args)),
        ip_address="203.0.113.1", user_agent="curl/8.0", referer=None,
    )

    assert target == "https://example.com"
    assert db_session.query(Click).count() == 0

    func, args = scheduled[0]
    func(*args)
    click = db_session.query(Click).one()
    assert click.link_id == link.id
    assert click.ip_address == "203.0.113.1"


def test_scheduler_failure_does_not_block_redirect(db_session, recorder):
    allocate(db_session, "https://example.com", custom_slug="still")

    def broken_schedule(*args):
        raise RuntimeError("queue full")

    target = resolve_and_track(
        db_session, "still", recorder, broken_schedule,
        ip_address="203.0.113.1", user_agent="curl/8.0",
    )

    assert target == "https://example.com"
