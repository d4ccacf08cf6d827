"""Domain enums."""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    GUIDE = "guide"


class Interest(str, Enum):
    ADVENTURE = "adventure"
    PILGRIMAGE = "pilgrimage"
    RELAXATION = "relaxation"
    BUSINESS = "business"


class TransportModeId(str, Enum):
    FLIGHT = "flight"
    TRAIN = "train"
    BUS = "bus"
    CAR = "car"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    UPI = "upi"
    NET_BANKING = "net_banking"
    DIGITAL_WALLET = "digital_wallet"


class PaymentStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


class BookingStage(str, Enum):
    BROWSING = "browsing"
    TRIP_FORM = "trip_form"
    AI_PLAN_REVIEW = "ai_plan_review"
    TRANSPORT_MODE_SELECT = "transport_mode_select"
    TRANSPORT_OPTION_SELECT = "transport_option_select"
    PAYMENT_METHOD_SELECT = "payment_method_select"
    PAYMENT_PROCESSING = "payment_processing"
    PAYMENT_RESULT = "payment_result"
    TRANSACTION_RECORDED = "transaction_recorded"
    CONFIRMATION = "confirmation"


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
