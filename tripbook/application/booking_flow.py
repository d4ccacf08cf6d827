"""Booking session state machine.

One ``BookingSession`` walks a single user through

    browsing -> trip_form -> ai_plan_review -> transport_mode_select
    -> transport_option_select -> payment_method_select -> payment_processing
    -> payment_result -> transaction_recorded -> confirmation -> browsing

Each operation is legal from exactly the stage(s) listed in ``_ALLOWED``;
anything else raises ``InvalidTransition``. Once a payment has succeeded the
session can only move forward.
"""

from __future__ import annotations

import json
from typing import Any, Optional, TypeVar

from pydantic import ValidationError

from tripbook.application.context import SessionContext
from tripbook.domain import catalog
from tripbook.domain.enums import BookingStage, PaymentMethod, PaymentStatus, TransportModeId
from tripbook.domain.exceptions import (
    DomainError,
    IncompleteTripForm,
    InvalidPaymentDetails,
    InvalidTransition,
)
from tripbook.domain.models import (
    BookedPlan,
    PaymentRecord,
    Transaction,
    TransportOption,
    TripPlan,
    TripSelection,
)
from tripbook.domain.planning import generate_plans
from tripbook.security.redact import mask_payment_details
from tripbook.shared.exceptions import ApiError

S = BookingStage

_ALLOWED: dict[str, frozenset[BookingStage]] = {
    "open_trip_form": frozenset({S.BROWSING}),
    "update_trip_form": frozenset({S.TRIP_FORM}),
    "generate_plan": frozenset({S.TRIP_FORM}),
    "select_plan": frozenset({S.AI_PLAN_REVIEW}),
    "select_transport_mode": frozenset({S.TRANSPORT_MODE_SELECT}),
    "select_transport_option": frozenset({S.TRANSPORT_OPTION_SELECT}),
    "select_payment_method": frozenset({S.PAYMENT_METHOD_SELECT}),
    "submit_payment": frozenset({S.PAYMENT_METHOD_SELECT}),
    "record_transaction": frozenset({S.PAYMENT_RESULT}),
    "confirm": frozenset({S.TRANSACTION_RECORDED}),
}

_BACK: dict[BookingStage, BookingStage] = {
    S.AI_PLAN_REVIEW: S.TRIP_FORM,
    S.TRANSPORT_MODE_SELECT: S.AI_PLAN_REVIEW,
    S.TRANSPORT_OPTION_SELECT: S.TRANSPORT_MODE_SELECT,
    S.PAYMENT_METHOD_SELECT: S.TRANSPORT_OPTION_SELECT,
}

_TRANSACTION_QUERIES = ("/api/transactions", "/api/transport-bookings")
_PLAN_QUERIES = ("/api/booked-plans",)

T = TypeVar("T")


class BookingSession:
    def __init__(self, ctx: SessionContext):
        self._ctx = ctx
        self.stage: BookingStage = S.BROWSING
        self.trail: list[BookingStage] = [S.BROWSING]
        self._reset()

    def _reset(self) -> None:
        self.trip = TripSelection()
        self.plans: list[TripPlan] = []
        self.plan: Optional[TripPlan] = None
        self.mode: Optional[TransportModeId] = None
        self.options: list[TransportOption] = []
        self.option: Optional[TransportOption] = None
        self.payment_method: Optional[PaymentMethod] = None
        self.payment: Optional[PaymentRecord] = None
        self.transaction: Optional[Transaction] = None
        self.sync_error: Optional[ApiError] = None
        self.booked_plan: Optional[BookedPlan] = None
        self.plan_sync_error: Optional[ApiError] = None

    # ── plumbing ────────────────────────────────────────

    def _require(self, operation: str) -> None:
        if self.stage not in _ALLOWED[operation]:
            raise InvalidTransition(self.stage.value, operation)

    def _need(self, value: Optional[T], operation: str) -> T:
        if value is None:
            raise InvalidTransition(self.stage.value, operation)
        return value

    def _move(self, target: BookingStage, **extra: Any) -> None:
        self._ctx.logger.transition(self.stage.value, target.value, **extra)
        self.stage = target
        self.trail.append(target)

    @property
    def payment_succeeded(self) -> bool:
        return self.payment is not None and self.payment.status == PaymentStatus.SUCCESS

    # ── trip form ───────────────────────────────────────

    def open_trip_form(self, destination: Optional[str] = None) -> TripSelection:
        self._require("open_trip_form")
        self._reset()
        if destination:
            self.trip = TripSelection(destination=destination)
        self._move(S.TRIP_FORM, destination=destination or "")
        return self.trip

    def update_trip_form(self, **fields: Any) -> TripSelection:
        """Apply form edits. Raises pydantic ``ValidationError`` on bad values."""
        self._require("update_trip_form")
        merged = {**self.trip.model_dump(exclude={"duration"}), **fields}
        self.trip = TripSelection.model_validate(merged)
        return self.trip

    def can_generate_plan(self) -> bool:
        return self.trip.is_complete()

    def generate_plan(self) -> list[TripPlan]:
        self._require("generate_plan")
        missing = self.trip.missing_fields()
        if missing:
            raise IncompleteTripForm(missing)

        self._ctx.store.save_trip_selection(self.trip)
        self._ctx.logger.stage_start("plan_generation", interest=self.trip.interest.value)
        self._ctx.sleeper(self._ctx.generation_delay_seconds)
        self.plans = generate_plans(self.trip, self._ctx.plan_rng)
        self._ctx.logger.stage_end("plan_generation", plans=len(self.plans))
        self._move(S.AI_PLAN_REVIEW)
        return self.plans

    def select_plan(self, index: int) -> TripPlan:
        self._require("select_plan")
        if not 0 <= index < len(self.plans):
            raise DomainError(f"no plan at position {index}")
        self.plan = self.plans[index]
        self._ctx.store.save_selected_plan(self.plan, self.trip)
        self._move(S.TRANSPORT_MODE_SELECT, plan_id=self.plan.id)
        return self.plan

    # ── transport ───────────────────────────────────────

    def select_transport_mode(self, mode: str | TransportModeId) -> list[TransportOption]:
        self._require("select_transport_mode")
        self.options = catalog.transport_options(mode)
        self.mode = catalog.resolve_mode(mode)
        self._move(S.TRANSPORT_OPTION_SELECT, mode=self.mode.value)
        return self.options

    def select_transport_option(self, option_id: str) -> TransportOption:
        self._require("select_transport_option")
        mode = self._need(self.mode, "select_transport_option")
        self.option = catalog.find_transport_option(mode, option_id)
        self._move(S.PAYMENT_METHOD_SELECT, option_id=option_id, amount=self.option.price)
        return self.option

    # ── payment ─────────────────────────────────────────

    def select_payment_method(self, method: str | PaymentMethod) -> PaymentMethod:
        self._require("select_payment_method")
        try:
            self.payment_method = PaymentMethod(str(getattr(method, "value", method)))
        except ValueError:
            raise DomainError(f"unknown payment method: {method}") from None
        return self.payment_method

    def submit_payment(self, details: dict[str, str]) -> PaymentRecord:
        self._require("submit_payment")
        if self.payment_method is None:
            raise DomainError("select a payment method before paying")
        missing = catalog.missing_payment_fields(self.payment_method, details)
        if missing:
            raise InvalidPaymentDetails(self.payment_method.value, missing)
        option = self._need(self.option, "submit_payment")

        self._move(S.PAYMENT_PROCESSING, method=self.payment_method.value)
        self._ctx.sleeper(self._ctx.payment_delay_seconds)
        self.payment = self._ctx.payment_processor().process(
            self.payment_method,
            option.price,
            mask_payment_details(details),
            booking_id=option.id,
        )
        self._ctx.logger.payment(
            self.payment.transaction_id,
            self.payment.status.value,
            amount=self.payment.amount,
        )
        self._move(S.PAYMENT_RESULT, status=self.payment.status.value)
        return self.payment

    # ── transaction log ─────────────────────────────────

    def _booking_details(self, option: TransportOption) -> dict[str, Any]:
        return {
            "serviceName": option.provider,
            "description": f"{self.mode.value if self.mode else ''} {option.seat_class}".strip(),
            "mode": self.mode.value if self.mode else None,
            "option": option.to_storage(),
            "plan": self.plan.title if self.plan else None,
            "trip": self.trip.to_storage(),
        }

    def record_transaction(self) -> Transaction:
        self._require("record_transaction")
        payment = self._need(self.payment, "record_transaction")
        option = self._need(self.option, "record_transaction")
        user = self._ctx.store.current_user()
        txn = Transaction(
            transaction_id=payment.transaction_id,
            amount=f"{payment.amount:.2f}",
            payment_method=payment.method.value,
            payment_status=payment.status.value,
            booking_type="transport",
            booking_details=json.dumps(self._booking_details(option), ensure_ascii=False),
            user_id=user.id if user else None,
            created_at=payment.timestamp,
        )
        self._ctx.store.append_transaction(txn)
        self.transaction = txn

        # stage advances once the local entry exists
        try:
            if self._ctx.remote is not None:
                body = txn.model_dump(mode="json", by_alias=True, exclude={"id", "created_at"})
                try:
                    self._ctx.remote.mutate(
                        "POST",
                        "/api/transactions",
                        body,
                        invalidates=_TRANSACTION_QUERIES,
                    )
                except ApiError as exc:
                    # local log keeps the entry; the remote copy is simply missing
                    self.sync_error = exc
                    self._ctx.logger.error("transaction_sync", str(exc), transaction_id=txn.transaction_id)
        finally:
            self._move(S.TRANSACTION_RECORDED, transaction_id=txn.transaction_id)
        return txn

    # ── confirmation ────────────────────────────────────

    def _booked_plan(self, payment: PaymentRecord) -> BookedPlan:
        option = self._need(self.option, "confirm")
        plan = self._need(self.plan, "confirm")
        cents = int(round(payment.amount * 100))
        return BookedPlan(
            plan_title=plan.title,
            destination=self.trip.destination,
            plan_details=json.dumps(plan.to_storage(), ensure_ascii=False),
            transport_details=json.dumps(
                {"mode": self.mode.value if self.mode else None, "option": option.to_storage()},
                ensure_ascii=False,
            ),
            itinerary_details=json.dumps([day.to_storage() for day in plan.itinerary], ensure_ascii=False),
            total_amount=cents,
            transport_amount=cents,
            payment_method=payment.method.value,
            travel_date=self.trip.start_date.isoformat() if self.trip.start_date else "",
            duration=plan.duration or self.trip.duration,
        )

    def _file_booked_plan(self) -> None:
        """POST the paid trip to the account's booked plans; failures are kept, not raised."""
        payment = self._need(self.payment, "confirm")
        if self._ctx.remote is None or not self._ctx.store.token():
            return
        plan = self._booked_plan(payment)
        body = plan.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id", "user_id", "booking_status", "created_at", "updated_at"},
        )
        try:
            stored = self._ctx.remote.mutate("POST", "/api/booked-plans", body, invalidates=_PLAN_QUERIES)
        except ApiError as exc:
            self.plan_sync_error = exc
            self._ctx.logger.error("booked_plan_sync", str(exc), transaction_id=payment.transaction_id)
            return
        self.booked_plan = BookedPlan.model_validate(stored) if stored else plan

    def confirm(self) -> Transaction:
        self._require("confirm")
        txn = self._need(self.transaction, "confirm")
        self._move(S.CONFIRMATION)
        if self.payment_succeeded:
            self._file_booked_plan()
        self._ctx.logger.summary(
            transaction_id=txn.transaction_id,
            amount=txn.amount,
            synced=self.sync_error is None,
            plan_filed=self.booked_plan is not None,
        )
        self._move(S.BROWSING)
        return txn

    # ── leaving the flow ────────────────────────────────

    def back(self) -> BookingStage:
        if self.stage == S.PAYMENT_RESULT and not self.payment_succeeded:
            self.payment = None
            self._move(S.PAYMENT_METHOD_SELECT)
            return self.stage
        target = _BACK.get(self.stage)
        if target is None:
            raise InvalidTransition(self.stage.value, "back")
        if target == S.TRANSPORT_OPTION_SELECT:
            self.option = None
        elif target == S.TRANSPORT_MODE_SELECT:
            self.mode, self.options = None, []
        elif target == S.AI_PLAN_REVIEW:
            self.plan = None
        self._move(target)
        return self.stage

    def cancel(self) -> None:
        """Drop in-progress state without persisting it."""
        if self.stage == S.BROWSING:
            return
        if self.payment_succeeded:
            raise InvalidTransition(self.stage.value, "cancel")
        self._reset()
        self._move(S.BROWSING, cancelled=True)


def validation_messages(exc: ValidationError) -> list[str]:
    return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]


__all__ = ["BookingSession", "validation_messages"]
