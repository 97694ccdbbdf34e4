"""Contact form submission and inquiry administration."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.exc import SQLAlchemyError

from ..dependencies import (
    error_response, get_analytics_service, get_inquiry_service, get_notifier,
)
from ..errors import InquiryNotFoundError
from ..schemas import InquiryCreatedResponse, InquiryOut, InquiryPayload, InquiryStatusUpdate
from ..services.analytics import AnalyticsService
from ..services.inquiries import InquiryService, validate_inquiry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inquiry", tags=["inquiry"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])

SUBMIT_ERROR = "An error occurred. Please try again or email us directly."


@router.post("", response_model=InquiryCreatedResponse)
def submit_inquiry(
    payload: InquiryPayload,
    request: Request,
    background_tasks: BackgroundTasks,
    inquiries: InquiryService = Depends(get_inquiry_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
    notifier=Depends(get_notifier),
):
    try:
        validate_inquiry(payload)
    except ValueError as e:
        return error_response(400, str(e))

    try:
        inquiry = inquiries.create_inquiry(payload, referrer=request.headers.get("referer"))
    except SQLAlchemyError:
        logger.exception("Submit inquiry error")
        return error_response(500, SUBMIT_ERROR)

    # Emails go out after the response; their outcome is only logged
    background_tasks.add_task(notifier.send_inquiry_notifications, InquiryOut.model_validate(inquiry))

    if payload.session_id:
        try:
            analytics.link_inquiry_to_session(payload.session_id, inquiry.id)
        except SQLAlchemyError:
            logger.exception("Link inquiry %s to session %s error", inquiry.id, payload.session_id)
            return error_response(500, SUBMIT_ERROR)

    return InquiryCreatedResponse(
        message="Thank you! We'll contact you within 24 hours.",
        inquiry_id=inquiry.id,
    )


@router.get("/{inquiry_id}")
def get_inquiry(inquiry_id: int, inquiries: InquiryService = Depends(get_inquiry_service)):
    try:
        inquiry = inquiries.get_inquiry_by_id(inquiry_id)
    except InquiryNotFoundError:
        return error_response(404, "Inquiry not found")
    except SQLAlchemyError:
        logger.exception("Get inquiry error")
        return error_response(500, "Error fetching inquiry")
    return {"success": True, "data": InquiryOut.model_validate(inquiry)}


@admin_router.get("/inquiries")
def list_recent_inquiries(limit: int = 50, inquiries: InquiryService = Depends(get_inquiry_service)):
    """Most recent inquiries with their visitor session context."""
    try:
        rows = inquiries.get_recent_inquiries(limit=max(1, min(limit, 500)))
    except SQLAlchemyError:
        logger.exception("Get recent inquiries error")
        return error_response(500, "Error fetching inquiries")
    return {"success": True, "data": rows}


@admin_router.patch("/inquiries/{inquiry_id}")
def update_inquiry_status(
    inquiry_id: int,
    update: InquiryStatusUpdate,
    inquiries: InquiryService = Depends(get_inquiry_service),
):
    try:
        inquiry = inquiries.update_inquiry_status(inquiry_id, update.status, update.notes)
    except InquiryNotFoundError:
        return error_response(404, "Inquiry not found")
    except SQLAlchemyError:
        logger.exception("Update inquiry error")
        return error_response(500, "Error updating inquiry")
    return {"success": True, "data": InquiryOut.model_validate(inquiry)}
