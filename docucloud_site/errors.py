"""Domain errors raised by the service layer."""


class TrackingError(Exception):
    """Base class for analytics and intake failures."""


class SessionNotFoundError(TrackingError):
    def __init__(self, session_id):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InquiryNotFoundError(TrackingError):
    def __init__(self, inquiry_id):
        super().__init__(f"Inquiry not found: {inquiry_id}")
        self.inquiry_id = inquiry_id
