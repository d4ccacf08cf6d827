"""API request/response models."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import Field, field_validator

from tripbook.domain.enums import BookingStatus, PaymentMethod, PaymentStatus, Role, TransportModeId
from tripbook.domain.models import CamelModel, User

_USERNAME_PATTERN = r"^[^\s]+$"


class RegisterRequest(CamelModel):
    username: str = Field(min_length=1, max_length=120, pattern=_USERNAME_PATTERN)
    password: str = Field(min_length=1, max_length=256)
    email: str = Field(default="", max_length=254)
    name: str = Field(default="", max_length=120)
    role: Role = Role.USER


class LoginRequest(CamelModel):
    username: str = Field(min_length=1, max_length=120)
    password: str = Field(min_length=1, max_length=256)


class LanguageRequest(CamelModel):
    language: str = Field(min_length=2, max_length=16)


class SessionResponse(CamelModel):
    token: str
    user: User


class MessageResponse(CamelModel):
    message: str


class TransactionCreateRequest(CamelModel):
    transaction_id: str = Field(min_length=1, max_length=64)
    amount: str
    payment_method: str = Field(min_length=1, max_length=32)
    payment_status: PaymentStatus
    booking_type: str = Field(default="transport", min_length=1, max_length=32)
    booking_details: str = "{}"
    user_id: Optional[int] = None

    @field_validator("amount")
    @classmethod
    def _decimal_amount(cls, value: str) -> str:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError("amount must be a decimal number") from None
        if not amount.is_finite() or amount < 0 or amount >= Decimal("100000000"):
            raise ValueError("amount must fit decimal(10,2)")
        return str(amount.quantize(Decimal("0.01")))


class TransactionStatusRequest(CamelModel):
    status: PaymentStatus


class TransportBookingRequest(CamelModel):
    mode: TransportModeId
    option_id: str = Field(min_length=1, max_length=64)
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD


class BookedPlanCreateRequest(CamelModel):
    plan_title: str = Field(min_length=1, max_length=200)
    destination: str = Field(min_length=1, max_length=200)
    plan_details: str = "{}"
    transport_details: str = "{}"
    hotel_details: str = "{}"
    itinerary_details: str = "[]"
    total_amount: int = Field(ge=0)
    transport_amount: int = Field(default=0, ge=0)
    hotel_amount: int = Field(default=0, ge=0)
    itinerary_amount: int = Field(default=0, ge=0)
    payment_method: str = Field(min_length=1, max_length=32)
    travel_date: str = Field(min_length=1, max_length=64)
    duration: str = Field(min_length=1, max_length=64)


class BookedPlanStatusRequest(CamelModel):
    status: BookingStatus


class SavedPlaceCreateRequest(CamelModel):
    user_id: int
    place_id: str = Field(min_length=1, max_length=64)
    title: str = Field(min_length=1, max_length=200)
    location: str = Field(min_length=1, max_length=200)
    thumbnail: str = Field(default="", max_length=500)


class SavedPlaceDeleteRequest(CamelModel):
    user_id: Optional[int] = None
    place_id: Optional[str] = None


class SavedPlaceCheckResponse(CamelModel):
    is_saved: bool


class HealthResponse(CamelModel):
    status: str = "ok"
    version: str = ""
