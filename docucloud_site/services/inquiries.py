"""Contact form inquiries."""

import logging
import re
from datetime import datetime
from typing import Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..errors import InquiryNotFoundError
from ..models import Inquiry, recent_inquiries_with_context

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_inquiry(payload) -> None:
    """Check a contact form submission.

    Raises ValueError with a visitor-facing message.
    """
    if not payload.name or not payload.email or not payload.message:
        raise ValueError("Name, email, and message are required.")
    if not EMAIL_RE.match(payload.email):
        raise ValueError("Please provide a valid email address.")
    if len(payload.name) < 2 or len(payload.name) > 255:
        raise ValueError("Name must be between 2 and 255 characters.")
    if len(payload.message) < 10:
        raise ValueError("Message must be at least 10 characters long.")


class InquiryService:
    def __init__(self, db: Session):
        self.db = db

    def create_inquiry(self, payload, referrer: Optional[str] = None) -> Inquiry:
        inquiry = Inquiry(
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            company=payload.company,
            message=payload.message,
            source=payload.source or "website",
            referrer=referrer,
            status="new",
        )
        try:
            self.db.add(inquiry)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(inquiry)
        logger.info("Inquiry %s created (source=%s)", inquiry.id, inquiry.source)
        return inquiry

    def get_inquiry_by_id(self, inquiry_id: int) -> Inquiry:
        inquiry = self.db.get(Inquiry, inquiry_id)
        if inquiry is None:
            raise InquiryNotFoundError(inquiry_id)
        return inquiry

    def update_inquiry_status(self, inquiry_id: int, status: str, notes: Optional[str] = None) -> Inquiry:
        inquiry = self.get_inquiry_by_id(inquiry_id)
        inquiry.status = status
        if notes:
            inquiry.notes = notes
        inquiry.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(inquiry)
        return inquiry

    def get_recent_inquiries(self, limit: int = 50):
        rows = self.db.execute(
            select(recent_inquiries_with_context)
            .order_by(desc(recent_inquiries_with_context.c.created_at))
            .limit(limit)
        ).mappings().all()
        return [dict(row) for row in rows]
