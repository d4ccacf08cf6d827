"""Domain semantic exceptions."""

from __future__ import annotations


class DomainError(Exception):
    """Base domain exception."""


class InvalidTransition(DomainError):
    """Raised when a booking operation is invoked from the wrong stage."""

    def __init__(self, current: str, attempted: str):
        self.current = current
        self.attempted = attempted
        super().__init__(f"cannot {attempted} while in stage {current}")


class IncompleteTripForm(DomainError):
    """Raised when plan generation is requested before the form is filled."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"trip form incomplete: missing {', '.join(self.missing)}")


class UnknownTransportMode(DomainError):
    """Raised for a mode id that has no catalog entry."""


class UnknownTransportOption(DomainError):
    """Raised for an option id not offered under the selected mode."""


class InvalidPaymentDetails(DomainError):
    """Raised when a payment method's required detail fields are empty."""

    def __init__(self, method: str, missing: list[str]):
        self.method = method
        self.missing = list(missing)
        super().__init__(f"payment details for {method} missing: {', '.join(self.missing)}")


class AuthError(DomainError):
    """Credentials rejected or no active session."""


class RoleMismatch(AuthError):
    """Account exists but is registered under the other role."""

    def __init__(self, registered_role: str):
        self.registered_role = registered_role
        super().__init__(f"This account is registered as a {registered_role}")


class DuplicateUser(DomainError):
    """Signup for an email or username that is already taken."""
