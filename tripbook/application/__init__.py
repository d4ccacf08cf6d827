"""Application orchestration layer."""

from tripbook.application.booking_flow import BookingSession
from tripbook.application.context import SessionContext, make_session_context

__all__ = ["BookingSession", "SessionContext", "make_session_context"]
