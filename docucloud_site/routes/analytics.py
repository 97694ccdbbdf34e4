"""Tracking endpoints called by the browser analytics script."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError

from ..dependencies import client_ip, error_response, get_analytics_service
from ..errors import SessionNotFoundError
from ..schemas import (
    EventPayload, PageViewPayload, SummaryData, SummaryResponse, TimeSpentPayload, TrackResponse,
)
from ..services.analytics import AnalyticsService, parse_days

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.post("/pageview", response_model=TrackResponse)
def track_pageview(
    payload: PageViewPayload,
    request: Request,
    service: AnalyticsService = Depends(get_analytics_service),
):
    if not payload.session_id or not payload.url:
        return error_response(400, "Session ID and URL are required")

    try:
        service.track_page_view(
            payload.session_id,
            payload.url,
            title=payload.title,
            referrer=payload.referrer,
            screen_width=payload.screen_width,
            screen_height=payload.screen_height,
            viewport_width=payload.viewport_width,
            viewport_height=payload.viewport_height,
            user_agent=request.headers.get("user-agent"),
            ip_address=client_ip(request),
        )
    except SQLAlchemyError:
        logger.exception("Track pageview error")
        return error_response(500, "Tracking error")
    return TrackResponse()


@router.post("/event", response_model=TrackResponse)
def track_event(
    payload: EventPayload,
    service: AnalyticsService = Depends(get_analytics_service),
):
    if not payload.session_id or not payload.name:
        return error_response(400, "Session ID and event name are required")

    try:
        service.track_event(
            payload.session_id,
            payload.name,
            category=payload.category,
            label=payload.label,
            value=payload.value,
            page_url=payload.page_url,
            metadata=payload.metadata,
        )
    except SessionNotFoundError:
        logger.warning("Event %r for unknown session %s", payload.name, payload.session_id)
        return error_response(404, "Session not found")
    except SQLAlchemyError:
        logger.exception("Track event error")
        return error_response(500, "Tracking error")
    return TrackResponse()


@router.post("/time-spent", response_model=TrackResponse)
def track_time_spent(
    payload: TimeSpentPayload,
    service: AnalyticsService = Depends(get_analytics_service),
):
    # timeSpent may legitimately be 0, so only its absence is rejected
    if not payload.session_id or not payload.page_url or payload.time_spent is None:
        return error_response(400, "Session ID, page URL, and time spent are required")

    try:
        result = service.update_time_spent(payload.session_id, payload.page_url, payload.time_spent)
    except SQLAlchemyError:
        logger.exception("Update time spent error")
        return error_response(500, "Tracking error")
    return TrackResponse(success=result["success"])


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    days: Optional[str] = None,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Reporting snapshot for the admin dashboard (unauthenticated)."""
    try:
        summary = service.get_summary(parse_days(days))
    except SQLAlchemyError:
        logger.exception("Get summary error")
        return error_response(500, "Error fetching analytics")
    return SummaryResponse(data=SummaryData(**summary))
