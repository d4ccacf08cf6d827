"""Pydantic domain models.

Records serialize with camelCase aliases so the same payload travels through
the local key/value store and the REST API unchanged.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from tripbook.domain.enums import (
    BookingStatus,
    Interest,
    PaymentMethod,
    PaymentStatus,
    Role,
    TransportModeId,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class User(CamelModel):
    id: Optional[int] = None
    username: str = ""
    email: str = ""
    name: str = ""
    password: Optional[str] = None
    role: Role = Role.USER
    language: str = "en"
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    country_of_residence: Optional[str] = None
    travel_style: Optional[str] = None
    travel_frequency: Optional[str] = None
    preferred_destinations: list[str] = Field(default_factory=list)
    passport_country: Optional[str] = None
    emergency_contact: Optional[str] = None
    dietary_preferences: list[str] = Field(default_factory=list)
    profile_completion_prompt_shown: bool = False

    def public(self) -> "User":
        return self.model_copy(update={"password": None})


class ProfileCompletion(CamelModel):
    phone: str = ""
    date_of_birth: str = ""
    country_of_residence: str = ""
    travel_style: str = ""
    travel_frequency: str = ""
    preferred_destinations: list[str] = Field(default_factory=list)
    passport_country: str = ""
    emergency_contact: str = ""
    dietary_preferences: list[str] = Field(default_factory=list)


class TripSelection(CamelModel):
    destination: str = ""
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    travelers: Optional[int] = Field(default=None, ge=1)
    budget: str = ""
    interest: Optional[Interest] = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "TripSelection":
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def duration(self) -> str:
        if self.start_date is None or self.end_date is None:
            return ""
        return f"{(self.end_date - self.start_date).days} days"

    def missing_fields(self) -> list[str]:
        missing: list[str] = []
        if not self.destination.strip():
            missing.append("destination")
        if self.start_date is None:
            missing.append("startDate")
        if self.end_date is None:
            missing.append("endDate")
        if not self.travelers:
            missing.append("travelers")
        if not self.budget.strip():
            missing.append("budget")
        if self.interest is None:
            missing.append("interest")
        return missing

    def is_complete(self) -> bool:
        return not self.missing_fields()


class PlanDay(CamelModel):
    day: int
    activities: list[str] = Field(default_factory=list)


class TripPlan(CamelModel):
    id: int
    title: str
    duration: str = ""
    feasibility_score: int = 0
    highlights: list[str] = Field(default_factory=list)
    itinerary: list[PlanDay] = Field(default_factory=list)
    estimated_cost: str = ""


class TransportMode(CamelModel):
    id: TransportModeId
    name: str
    description: str = ""
    base_price: float = 0.0


class TransportOption(CamelModel):
    id: str
    provider: str
    price: float
    rating: float = 0.0
    duration: str = ""
    departure_time: str = ""
    arrival_time: str = ""
    seat_class: str = ""
    comfort: str = ""
    amenities: list[str] = Field(default_factory=list)
    availability: int = 0


class PaymentRecord(CamelModel):
    method: PaymentMethod
    amount: float
    details: dict[str, str] = Field(default_factory=dict)
    booking_id: Optional[str] = None
    timestamp: str
    status: PaymentStatus = PaymentStatus.SUCCESS
    transaction_id: str


class Transaction(CamelModel):
    id: Optional[int] = None
    transaction_id: str
    amount: str
    payment_method: str
    payment_status: str
    booking_type: str = "transport"
    booking_details: str = "{}"
    user_id: Optional[int] = None
    created_at: Optional[str] = None


class BookedPlan(CamelModel):
    """Trip summary filed after checkout. Amounts are integer cents."""

    id: Optional[int] = None
    user_id: Optional[int] = None
    plan_title: str
    destination: str
    plan_details: str = "{}"
    transport_details: str = "{}"
    hotel_details: str = "{}"
    itinerary_details: str = "[]"
    total_amount: int = 0
    transport_amount: int = 0
    hotel_amount: int = 0
    itinerary_amount: int = 0
    payment_method: str
    booking_status: BookingStatus = BookingStatus.CONFIRMED
    travel_date: str
    duration: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SavedPlace(CamelModel):
    id: Optional[int] = None
    user_id: int
    place_id: str
    title: str
    location: str
    thumbnail: str = ""
    created_at: Optional[str] = None


class TrendingPlace(CamelModel):
    id: str
    title: str
    location: str
    rating: float = 0.0
    thumbnail: str = ""
    description: str = ""
