import random
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from docucloud_site.check_db import check_database
from docucloud_site.errors import SessionNotFoundError
from docucloud_site.models import Event, Inquiry, PageView, VisitorSession
from docucloud_site.ratelimit import CLEANUP_INTERVAL_SECONDS, RateLimiter
from docucloud_site.services.analytics import AnalyticsService, _dialect_insert, parse_days
from docucloud_site.simulate_data import build_journey


def _make_inquiry(db):
    inquiry = Inquiry(name="Ada Lovelace", email="ada@example.com", message="Please call me back soon.")
    db.add(inquiry)
    db.commit()
    return inquiry


def test_get_or_create_session_is_idempotent(db):
    service = AnalyticsService(db)
    first = service.get_or_create_session("tok", user_agent="Mozilla/5.0", page_url="/home")
    second = service.get_or_create_session("tok", page_url="/other")
    db.commit()

    assert first.id == second.id
    assert second.landing_page == "/home"
    assert db.execute(select(func.count()).select_from(VisitorSession)).scalar_one() == 1


def test_get_or_create_session_defaults(db):
    session = AnalyticsService(db).get_or_create_session("fresh", ip_address="203.0.113.9")
    assert session.page_views == 0
    assert session.total_time_spent == 0
    assert session.submitted_inquiry is False
    assert session.inquiry_id is None
    assert session.ip_address == "203.0.113.9"
    assert session.device_type == "desktop"


def test_time_spent_updates_latest_matching_view_only(db):
    service = AnalyticsService(db)
    service.track_page_view("tok", "/pricing")
    service.track_page_view("tok", "/home")
    service.track_page_view("tok", "/pricing")

    assert service.update_time_spent("tok", "/pricing", 25) == {"success": True}

    views = db.execute(select(PageView).order_by(PageView.id)).scalars().all()
    assert [(v.page_url, v.time_spent) for v in views] == [
        ("/pricing", None),
        ("/home", None),
        ("/pricing", 25),
    ]


def test_time_spent_without_matching_view_still_counts(db):
    service = AnalyticsService(db)
    service.track_page_view("tok", "/home")
    service.update_time_spent("tok", "/elsewhere", 8)

    db.expire_all()
    session = service.find_session("tok")
    assert session.total_time_spent == 8
    assert session.page_view_rows[0].time_spent is None


def test_track_event_unknown_session_raises(db):
    with pytest.raises(SessionNotFoundError):
        AnalyticsService(db).track_event("ghost", "button_click")
    assert db.execute(select(func.count()).select_from(Event)).scalar_one() == 0


def test_link_inquiry_is_idempotent(db):
    service = AnalyticsService(db)
    service.track_page_view("tok", "/contact")
    inquiry = _make_inquiry(db)

    for _ in range(2):
        assert service.link_inquiry_to_session("tok", inquiry.id) == {"success": True}
        db.expire_all()
        session = service.find_session("tok")
        assert session.submitted_inquiry is True
        assert session.inquiry_id == inquiry.id


def test_link_inquiry_unknown_session_is_silent(db):
    inquiry = _make_inquiry(db)
    assert AnalyticsService(db).link_inquiry_to_session("ghost", inquiry.id) == {"success": True}
    assert db.execute(select(func.count()).select_from(VisitorSession)).scalar_one() == 0


def test_get_or_create_session_adopts_concurrently_inserted_row(db):
    other = sessionmaker(bind=db.get_bind())()
    other.add(VisitorSession(session_id="raced", landing_page="/first"))
    other.commit()
    existing_id = other.execute(select(VisitorSession.id)).scalar_one()
    other.close()

    service = AnalyticsService(db)
    find_session = service.find_session
    lookups = []

    def missing_on_first_lookup(session_id):
        lookups.append(session_id)
        return None if len(lookups) == 1 else find_session(session_id)

    service.find_session = missing_on_first_lookup
    session = service.get_or_create_session("raced", page_url="/second")
    db.commit()

    assert len(lookups) == 2
    assert session.id == existing_id
    assert session.landing_page == "/first"
    assert db.execute(select(func.count()).select_from(VisitorSession)).scalar_one() == 1


def test_unsupported_dialect_is_rejected():
    db = SimpleNamespace(get_bind=lambda: SimpleNamespace(dialect=SimpleNamespace(name="mysql")))
    with pytest.raises(ValueError, match="mysql"):
        _dialect_insert(db)


def test_summary_on_empty_store(db):
    assert AnalyticsService(db).get_summary(30) == {"stats": [], "top_pages": [], "sources": []}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("7", 7), (7, 7), ("abc", 30), (None, 30), ("", 30), ("0", 30), ("-5", 30), ("2.5", 30),
        ("5000", 3650), ("1000000", 3650),
    ],
)
def test_parse_days(value, expected):
    assert parse_days(value) == expected


def test_rate_limiter_window():
    now = [0.0]
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=lambda: now[0])

    assert limiter.allow("1.2.3.4") == (True, 0)
    assert limiter.allow("1.2.3.4") == (True, 0)
    allowed, retry_after = limiter.allow("1.2.3.4")
    assert not allowed
    assert retry_after == 60
    assert limiter.allow("5.6.7.8")[0]

    now[0] = 61.0
    assert limiter.allow("1.2.3.4") == (True, 0)


def test_rate_limiter_cleanup_is_throttled():
    now = [0.0]
    limiter = RateLimiter(max_requests=5, window_seconds=10, clock=lambda: now[0])
    limiter.allow("a")
    limiter.allow("b")

    now[0] = 20.0
    limiter.allow("c")
    assert limiter.tracked_keys() == 3

    now[0] = CLEANUP_INTERVAL_SECONDS + 1.0
    limiter.allow("c")
    assert limiter.tracked_keys() == 1


def test_check_database_counts(db):
    service = AnalyticsService(db)
    service.track_page_view("tok", "/home")
    service.track_event("tok", "button_click")

    counts, errors = check_database(sessionmaker(bind=db.get_bind()))
    assert errors == {}
    assert counts == {"inquiries": 0, "visitor_sessions": 1, "page_views": 1, "events": 1}


def test_simulated_journey_shape():
    session_id, steps = build_journey("http://localhost:3000", rng=random.Random(7))
    paths = [path for path, _ in steps]

    assert session_id.startswith("session_")
    assert paths[0] == "/api/analytics/pageview"
    assert all(payload["sessionId"] == session_id for _, payload in steps)
    assert paths.count("/api/analytics/pageview") == paths.count("/api/analytics/time-spent")
