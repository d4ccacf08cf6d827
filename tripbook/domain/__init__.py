"""Domain package exports."""

from tripbook.domain.enums import (
    BookingStage,
    BookingStatus,
    Interest,
    PaymentMethod,
    PaymentStatus,
    Role,
    TransportModeId,
)
from tripbook.domain.exceptions import (
    AuthError,
    DomainError,
    DuplicateUser,
    IncompleteTripForm,
    InvalidPaymentDetails,
    InvalidTransition,
    RoleMismatch,
    UnknownTransportMode,
    UnknownTransportOption,
)
from tripbook.domain.models import (
    BookedPlan,
    PaymentRecord,
    PlanDay,
    ProfileCompletion,
    SavedPlace,
    Transaction,
    TransportMode,
    TransportOption,
    TrendingPlace,
    TripPlan,
    TripSelection,
    User,
)

__all__ = [
    "AuthError",
    "BookedPlan",
    "BookingStage",
    "BookingStatus",
    "DomainError",
    "DuplicateUser",
    "IncompleteTripForm",
    "Interest",
    "InvalidPaymentDetails",
    "InvalidTransition",
    "PaymentMethod",
    "PaymentRecord",
    "PaymentStatus",
    "PlanDay",
    "ProfileCompletion",
    "Role",
    "RoleMismatch",
    "SavedPlace",
    "Transaction",
    "TransportMode",
    "TransportModeId",
    "TransportOption",
    "TrendingPlace",
    "TripPlan",
    "TripSelection",
    "UnknownTransportMode",
    "UnknownTransportOption",
    "User",
]
