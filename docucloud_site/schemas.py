from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any, List
from datetime import date, datetime


class TrackingPayload(BaseModel):
    """Base for bodies sent by the browser tracking script (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId", description="Client-generated session token")


class PageViewPayload(TrackingPayload):
    """
    Body of POST /api/analytics/pageview.
    sessionId and url are required; the route rejects missing values with 400.
    """
    url: Optional[str] = Field(None, description="The full URL that was viewed")
    title: Optional[str] = None
    referrer: Optional[str] = Field(None, description="document.referrer on the landing page")

    # Device/Browser Info
    screen_width: Optional[int] = Field(None, alias="screenWidth")
    screen_height: Optional[int] = Field(None, alias="screenHeight")
    viewport_width: Optional[int] = Field(None, alias="viewportWidth")
    viewport_height: Optional[int] = Field(None, alias="viewportHeight")


class EventPayload(TrackingPayload):
    name: Optional[str] = Field(None, description="Event name, e.g. 'button_click'")
    category: Optional[str] = None
    label: Optional[str] = None
    value: Optional[float] = None
    page_url: Optional[str] = Field(None, alias="pageUrl")

    # Custom Data, stored verbatim
    metadata: Optional[Any] = Field(None, description="Arbitrary JSON attached to the event")


class TimeSpentPayload(TrackingPayload):
    page_url: Optional[str] = Field(None, alias="pageUrl")
    time_spent: Optional[int] = Field(None, alias="timeSpent", description="Seconds on the page")


class TrackResponse(BaseModel):
    success: bool = True


class DailyStat(BaseModel):
    date: date
    sessions: int = 0
    page_views: Optional[int] = 0
    avg_time_spent: Optional[float] = None
    inquiries: Optional[int] = 0
    mobile_sessions: Optional[int] = 0
    desktop_sessions: Optional[int] = 0


class TopPage(BaseModel):
    page_url: str
    views: int
    unique_sessions: int
    avg_time_spent: Optional[float] = None


class TrafficSource(BaseModel):
    source: str
    sessions: int
    inquiries: Optional[int] = 0


class SummaryData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stats: List[DailyStat]
    top_pages: List[TopPage] = Field(alias="topPages")
    sources: List[TrafficSource]


class SummaryResponse(BaseModel):
    success: bool = True
    data: SummaryData


class InquiryPayload(TrackingPayload):
    """Contact form submission."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None


class InquiryStatusUpdate(BaseModel):
    status: str = Field(..., description="New pipeline status, e.g. 'contacted'")
    notes: Optional[str] = None


class InquiryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    message: str
    source: Optional[str] = "website"
    referrer: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class InquiryContext(BaseModel):
    """Row of recent_inquiries_with_context."""
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    message: str
    source: Optional[str] = None
    status: str
    created_at: datetime
    session_id: Optional[str] = None
    landing_page: Optional[str] = None
    device_type: Optional[str] = None
    page_views: Optional[int] = None
    total_time_spent: Optional[int] = None


class InquiryCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    inquiry_id: int = Field(alias="inquiryId")
