"""Visitor session and analytics tracking."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import desc, select, update
from sqlalchemy.orm import Session

from ..errors import SessionNotFoundError
from ..models import (
    Event, PageView, VisitorSession, daily_visitor_stats, top_pages, traffic_sources,
)
from ..useragent import parse_user_agent

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_DAYS = 30
TOP_PAGES_LIMIT = 10
MAX_SUMMARY_DAYS = 3650


def parse_days(value, default: int = DEFAULT_SUMMARY_DAYS) -> int:
    """Coerce the ``days`` query value.

    Unusable values fall back to the default; large ones are capped at
    MAX_SUMMARY_DAYS so the window start stays a valid date.
    """
    try:
        days = int(value)
    except (TypeError, ValueError):
        return default
    if days <= 0:
        return default
    return min(days, MAX_SUMMARY_DAYS)


def _dialect_insert(db: Session):
    """The bound dialect's insert(), which supports ON CONFLICT."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise ValueError(f"Unsupported database dialect for session tracking: {dialect}")
    return insert


class AnalyticsService:
    """Tracking operations against one database session.

    Each public method commits its own work. Counters are incremented in SQL
    so concurrent requests for the same session never lose updates.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_session(self, session_id: str) -> Optional[VisitorSession]:
        return self.db.execute(
            select(VisitorSession).where(VisitorSession.session_id == session_id)
        ).scalar_one_or_none()

    def get_or_create_session(
        self,
        session_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        referrer: Optional[str] = None,
        page_url: Optional[str] = None,
    ) -> VisitorSession:
        existing = self.find_session(session_id)
        if existing is not None:
            return existing

        client = parse_user_agent(user_agent)
        now = datetime.utcnow()
        insert = _dialect_insert(self.db)
        stmt = insert(VisitorSession).values(
            session_id=session_id,
            created_at=now,
            last_seen=now,
            ip_address=ip_address,
            user_agent=user_agent,
            device_type=client.device_type,
            browser=client.browser,
            os=client.os,
            referrer=referrer,
            landing_page=page_url,
            page_views=0,
            total_time_spent=0,
            submitted_inquiry=False,
        ).on_conflict_do_nothing(index_elements=["session_id"])
        # A concurrent request may have inserted the same token; either way the row now exists
        self.db.execute(stmt)
        return self.find_session(session_id)

    def track_page_view(
        self,
        session_id: str,
        url: str,
        title: Optional[str] = None,
        referrer: Optional[str] = None,
        screen_width: Optional[int] = None,
        screen_height: Optional[int] = None,
        viewport_width: Optional[int] = None,
        viewport_height: Optional[int] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> dict:
        try:
            session = self.get_or_create_session(
                session_id,
                user_agent=user_agent,
                ip_address=ip_address,
                referrer=referrer,
                page_url=url,
            )

            self.db.add(PageView(
                session_id=session.id,
                page_url=url,
                page_title=title,
                screen_width=screen_width,
                screen_height=screen_height,
                viewport_width=viewport_width,
                viewport_height=viewport_height,
                viewed_at=datetime.utcnow(),
            ))

            self.db.execute(
                update(VisitorSession)
                .where(VisitorSession.id == session.id)
                .values(
                    page_views=VisitorSession.page_views + 1,
                    last_seen=datetime.utcnow(),
                    exit_page=url,
                )
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return {"success": True}

    def track_event(
        self,
        session_id: str,
        name: str,
        category: Optional[str] = None,
        label: Optional[str] = None,
        value: Optional[float] = None,
        page_url: Optional[str] = None,
        metadata=None,
    ) -> dict:
        session = self.find_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        try:
            self.db.add(Event(
                session_id=session.id,
                event_name=name,
                event_category=category,
                event_label=label,
                event_value=value,
                page_url=page_url,
                event_metadata=metadata,
            ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return {"success": True}

    def update_time_spent(self, session_id: str, page_url: str, time_spent: int) -> dict:
        """Add ``time_spent`` to the session total and record it on the latest matching view.

        The client re-reports a running figure for the current view, so the
        page view's value is overwritten rather than accumulated. Unknown
        sessions are tolerated and reported as ``success: False``.
        """
        session = self.find_session(session_id)
        if session is None:
            return {"success": False}

        try:
            self.db.execute(
                update(VisitorSession)
                .where(VisitorSession.id == session.id)
                .values(
                    total_time_spent=VisitorSession.total_time_spent + time_spent,
                    last_seen=datetime.utcnow(),
                )
            )

            recent_view = self.db.execute(
                select(PageView)
                .where(PageView.session_id == session.id, PageView.page_url == page_url)
                .order_by(desc(PageView.viewed_at), desc(PageView.id))
                .limit(1)
            ).scalar_one_or_none()
            if recent_view is not None:
                recent_view.time_spent = time_spent

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return {"success": True}

    def link_inquiry_to_session(self, session_id: str, inquiry_id: int) -> dict:
        # Unknown tokens update nothing; the inquiry itself is already stored
        try:
            result = self.db.execute(
                update(VisitorSession)
                .where(VisitorSession.session_id == session_id)
                .values(submitted_inquiry=True, inquiry_id=inquiry_id)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        if result.rowcount == 0:
            logger.info("No session %s to link inquiry %s to", session_id, inquiry_id)
        return {"success": True}

    def get_summary(self, days: int = DEFAULT_SUMMARY_DAYS) -> dict:
        days = min(days, MAX_SUMMARY_DAYS)
        start_date = datetime.utcnow().date() - timedelta(days=days)

        stats = self.db.execute(
            select(daily_visitor_stats)
            .where(daily_visitor_stats.c.date >= start_date)
            .order_by(desc(daily_visitor_stats.c.date))
        ).mappings().all()

        pages = self.db.execute(
            select(top_pages)
            .order_by(desc(top_pages.c.views), top_pages.c.page_url)
            .limit(TOP_PAGES_LIMIT)
        ).mappings().all()

        sources = self.db.execute(
            select(traffic_sources).order_by(desc(traffic_sources.c.sessions))
        ).mappings().all()

        return {
            "stats": [dict(row) for row in stats],
            "top_pages": [dict(row) for row in pages],
            "sources": [dict(row) for row in sources],
        }
