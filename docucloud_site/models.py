from sqlalchemy import (
    Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, JSON, MetaData,
    String, Table, Text,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base


class VisitorSession(Base):
    __tablename__ = "visitor_sessions"

    id = Column(Integer, primary_key=True, index=True)
    # Client-generated token; uniqueness makes insert-or-fetch atomic in the store
    session_id = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    last_seen = Column(DateTime, default=datetime.utcnow)

    # Device/Browser Info
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    device_type = Column(String(16), nullable=True)
    browser = Column(String(128), nullable=True)
    os = Column(String(128), nullable=True)

    # Navigation
    referrer = Column(Text, nullable=True)
    landing_page = Column(Text, nullable=True)
    exit_page = Column(Text, nullable=True)

    # Counters
    page_views = Column(Integer, nullable=False, default=0)
    total_time_spent = Column(Integer, nullable=False, default=0)

    # Conversion
    submitted_inquiry = Column(Boolean, nullable=False, default=False)
    inquiry_id = Column(Integer, ForeignKey("inquiries.id", ondelete="SET NULL"), nullable=True)

    page_view_rows = relationship(
        "PageView", back_populates="session", cascade="all, delete-orphan", passive_deletes=True
    )
    events = relationship(
        "Event", back_populates="session", cascade="all, delete-orphan", passive_deletes=True
    )


class PageView(Base):
    __tablename__ = "page_views"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(
        Integer, ForeignKey("visitor_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    page_url = Column(Text, nullable=False)
    page_title = Column(Text, nullable=True)
    screen_width = Column(Integer, nullable=True)
    screen_height = Column(Integer, nullable=True)
    viewport_width = Column(Integer, nullable=True)
    viewport_height = Column(Integer, nullable=True)
    viewed_at = Column(DateTime, default=datetime.utcnow, index=True)
    time_spent = Column(Integer, nullable=True)

    session = relationship("VisitorSession", back_populates="page_view_rows")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(
        Integer, ForeignKey("visitor_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    event_name = Column(String(255), nullable=False, index=True)
    event_category = Column(String(255), nullable=True)
    event_label = Column(Text, nullable=True)
    event_value = Column(Float, nullable=True)
    page_url = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Custom Data (stored as JSON); "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSON, nullable=True)

    session = relationship("VisitorSession", back_populates="events")


class Inquiry(Base):
    __tablename__ = "inquiries"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(64), nullable=True)
    company = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    source = Column(String(64), nullable=False, default="website")
    referrer = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="new", index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# Reporting views. They live in their own MetaData so create_all never
# tries to create them as tables; database.create_reporting_views does.
reporting_metadata = MetaData()

daily_visitor_stats = Table(
    "daily_visitor_stats",
    reporting_metadata,
    Column("date", Date),
    Column("sessions", Integer),
    Column("page_views", Integer),
    Column("avg_time_spent", Float),
    Column("inquiries", Integer),
    Column("mobile_sessions", Integer),
    Column("desktop_sessions", Integer),
)

top_pages = Table(
    "top_pages",
    reporting_metadata,
    Column("page_url", Text),
    Column("views", Integer),
    Column("unique_sessions", Integer),
    Column("avg_time_spent", Float),
)

traffic_sources = Table(
    "traffic_sources",
    reporting_metadata,
    Column("source", Text),
    Column("sessions", Integer),
    Column("inquiries", Integer),
)

recent_inquiries_with_context = Table(
    "recent_inquiries_with_context",
    reporting_metadata,
    Column("id", Integer),
    Column("name", String),
    Column("email", String),
    Column("phone", String),
    Column("company", String),
    Column("message", Text),
    Column("source", String),
    Column("status", String),
    Column("created_at", DateTime),
    Column("session_id", String),
    Column("landing_page", Text),
    Column("device_type", String),
    Column("page_views", Integer),
    Column("total_time_spent", Integer),
)

VIEW_DEFINITIONS = {
    "daily_visitor_stats": """
        SELECT DATE(created_at) AS date,
               COUNT(*) AS sessions,
               SUM(page_views) AS page_views,
               ROUND(AVG(total_time_spent), 1) AS avg_time_spent,
               SUM(CASE WHEN submitted_inquiry THEN 1 ELSE 0 END) AS inquiries,
               SUM(CASE WHEN device_type = 'mobile' THEN 1 ELSE 0 END) AS mobile_sessions,
               SUM(CASE WHEN device_type = 'desktop' THEN 1 ELSE 0 END) AS desktop_sessions
        FROM visitor_sessions
        GROUP BY DATE(created_at)
    """,
    "top_pages": """
        SELECT page_url,
               COUNT(*) AS views,
               COUNT(DISTINCT session_id) AS unique_sessions,
               ROUND(AVG(time_spent), 1) AS avg_time_spent
        FROM page_views
        GROUP BY page_url
    """,
    "traffic_sources": """
        SELECT COALESCE(NULLIF(referrer, ''), 'direct') AS source,
               COUNT(*) AS sessions,
               SUM(CASE WHEN submitted_inquiry THEN 1 ELSE 0 END) AS inquiries
        FROM visitor_sessions
        GROUP BY COALESCE(NULLIF(referrer, ''), 'direct')
    """,
    "recent_inquiries_with_context": """
        SELECT i.id, i.name, i.email, i.phone, i.company, i.message, i.source,
               i.status, i.created_at,
               s.session_id, s.landing_page, s.device_type, s.page_views,
               s.total_time_spent
        FROM inquiries i
        LEFT JOIN visitor_sessions s ON s.inquiry_id = i.id
    """,
}
