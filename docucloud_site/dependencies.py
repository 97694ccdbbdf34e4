from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .database import get_db
from .services.analytics import AnalyticsService
from .services.inquiries import InquiryService


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


def get_inquiry_service(db: Session = Depends(get_db)) -> InquiryService:
    return InquiryService(db)


def get_notifier(request: Request):
    return request.app.state.notifier


def client_ip(request: Request):
    return request.client.host if request.client else None


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})
