"""tripbook CLI: walk one booking from the trip form to a recorded transaction."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from tripbook.application.booking_flow import BookingSession, validation_messages
from tripbook.application.context import SessionContext, make_session_context
from tripbook.config.settings import load_settings
from tripbook.domain import catalog
from tripbook.domain.enums import BookingStage, Interest, PaymentMethod, PaymentStatus, TransportModeId
from tripbook.domain.exceptions import DomainError
from tripbook.domain.models import ProfileCompletion, Transaction, TripPlan, User
from tripbook.domain.profile import should_show_profile_prompt
from tripbook.infrastructure.mock_auth import MockAuthService
from tripbook.infrastructure.remote_auth import RemoteAuthService
from tripbook.services.history_service import transaction_history
from tripbook.shared.exceptions import ApiError

load_dotenv()

Prompt = Callable[[str], str]
Output = Callable[[str], None]


def _ask(prompt: Prompt, label: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    answer = prompt(f"{label}{suffix}: ").strip()
    return answer or default


def _choose(prompt: Prompt, out: Output, label: str, choices: list[str]) -> int:
    for i, choice in enumerate(choices, start=1):
        out(f"  {i}. {choice}")
    while True:
        raw = _ask(prompt, label)
        if raw.isdigit() and 1 <= int(raw) <= len(choices):
            return int(raw) - 1
        out(f"Enter a number between 1 and {len(choices)}")


def _format_plan(plan: TripPlan) -> str:
    lines = [
        f"{plan.title}  ({plan.duration}, feasibility {plan.feasibility_score}%)",
        f"  Estimated cost: {plan.estimated_cost}",
        f"  Highlights: {', '.join(plan.highlights)}",
    ]
    for day in plan.itinerary:
        lines.append(f"  Day {day.day}: {'; '.join(day.activities)}")
    return "\n".join(lines)


def _format_transaction(txn: Transaction) -> str:
    return f"{txn.transaction_id}  ${txn.amount}  {txn.payment_method}  {txn.payment_status}"


# ── account ─────────────────────────────────────────


def _sign_in(auth, prompt: Prompt, out: Output) -> Optional[User]:
    user = auth.current_user()
    if user is not None:
        out(f"Signed in as {user.name or user.username}")
        return user

    action = _choose(prompt, out, "Account", ["Log in", "Sign up", "Continue as guest"])
    if action == 2:
        return None
    email = _ask(prompt, "Email")
    password = _ask(prompt, "Password")
    try:
        if isinstance(auth, RemoteAuthService):
            if action == 1:
                return auth.register(email, password, name=_ask(prompt, "Name"))
            return auth.login(email, password)
        if action == 1:
            name = _ask(prompt, "Name")
            confirm = _ask(prompt, "Confirm password")
            return auth.signup(name, email, password, confirm)
        return auth.login(email, password)
    except DomainError as exc:
        out(f"Sign-in failed: {exc}")
        return None


def _maybe_complete_profile(auth, user: Optional[User], prompt: Prompt, out: Output) -> None:
    if not should_show_profile_prompt(user):
        return
    out("Your travel profile is incomplete.")
    if _ask(prompt, "Complete it now? (y/n)", "n").lower() != "y":
        auth.mark_prompt_shown()
        return
    profile = ProfileCompletion(
        phone=_ask(prompt, "Phone"),
        date_of_birth=_ask(prompt, "Date of birth (YYYY-MM-DD)"),
        country_of_residence=_ask(prompt, "Country of residence"),
        travel_style=_ask(prompt, "Travel style"),
        travel_frequency=_ask(prompt, "Travel frequency"),
    )
    auth.complete_profile(profile)
    out("Profile saved.")


# ── booking walkthrough ─────────────────────────────


def _fill_trip_form(session: BookingSession, prompt: Prompt, out: Output) -> None:
    interests = [i.value for i in Interest]
    while not session.can_generate_plan():
        trip = session.trip
        fields = {
            "destination": _ask(prompt, "Destination", trip.destination),
            "start_date": _ask(prompt, "Start date (YYYY-MM-DD)", str(trip.start_date or "")) or None,
            "end_date": _ask(prompt, "End date (YYYY-MM-DD)", str(trip.end_date or "")) or None,
            "travelers": _ask(prompt, "Travelers", str(trip.travelers or "")) or None,
            "budget": _ask(prompt, "Budget (USD)", trip.budget),
            "interest": interests[_choose(prompt, out, "Interest", interests)],
        }
        try:
            session.update_trip_form(**fields)
        except ValidationError as exc:
            for message in validation_messages(exc):
                out(f"  {message}")
            continue
        missing = session.trip.missing_fields()
        if missing:
            out(f"Still missing: {', '.join(missing)}")


def _payment_details(method: PaymentMethod, prompt: Prompt) -> dict[str, str]:
    return {name: _ask(prompt, name) for name in catalog.PAYMENT_REQUIRED_FIELDS[method]}


def run_booking(session: BookingSession, prompt: Prompt = input, out: Output = print) -> Optional[Transaction]:
    """Drive ``session`` interactively; returns the recorded transaction, if any."""
    trending = catalog.trending_places()
    out("Trending destinations:")
    pick = _choose(prompt, out, "Start from", [f"{p.title} ({p.location})" for p in trending] + ["Other"])
    session.open_trip_form(trending[pick].title if pick < len(trending) else None)

    _fill_trip_form(session, prompt, out)
    out("Generating plans...")
    plans = session.generate_plan()
    for plan in plans:
        out(_format_plan(plan))
    session.select_plan(_choose(prompt, out, "Plan", [p.title for p in plans]))

    modes = catalog.transport_modes()
    mode = modes[_choose(prompt, out, "Transport", [f"{m.name}: {m.description}" for m in modes])]
    options = session.select_transport_mode(TransportModeId(mode.id))
    option = options[
        _choose(
            prompt,
            out,
            "Option",
            [f"{o.provider} {o.departure_time}-{o.arrival_time} {o.seat_class} ${o.price:.2f}" for o in options],
        )
    ]
    session.select_transport_option(option.id)

    methods = list(PaymentMethod)
    while session.stage == BookingStage.PAYMENT_METHOD_SELECT:
        method = methods[
            _choose(prompt, out, "Payment method", [catalog.PAYMENT_METHOD_LABELS[m] for m in methods])
        ]
        session.select_payment_method(method)
        try:
            payment = session.submit_payment(_payment_details(method, prompt))
        except DomainError as exc:
            out(str(exc))
            continue
        if payment.status != PaymentStatus.SUCCESS:
            out(f"Payment {payment.status.value}. Choose another method.")
            session.back()

    txn = session.record_transaction()
    if session.sync_error is not None:
        out(f"Saved locally; server sync failed: {session.sync_error}")
    session.confirm()
    out(f"Booking confirmed: {_format_transaction(txn)}")
    if session.booked_plan is not None:
        out(f"Trip filed as booked plan #{session.booked_plan.id}")
    elif session.plan_sync_error is not None:
        out(f"Booked plan not filed: {session.plan_sync_error}")
    return txn


def _print_history(ctx: SessionContext, out: Output) -> None:
    history = transaction_history(ctx=ctx)
    out("Local transactions:")
    for txn in history["local"]:
        out(f"  {_format_transaction(txn)}")
    if history["remote_error"]:
        out(f"Server history unavailable: {history['remote_error']}")
    elif history["remote"]:
        out("Server bookings:")
        for row in history["remote"]:
            out(f"  {row.get('transactionId')}  ${row.get('amount')}  {row.get('paymentStatus')}")
    if history["plans"]:
        out("Booked plans:")
        for plan in history["plans"]:
            out(f"  #{plan.id}  {plan.plan_title}  {plan.destination}  ${plan.total_amount / 100:.2f}  {plan.booking_status.value}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Book a trip from the terminal")
    parser.add_argument("--remote", action="store_true", help="authenticate and sync against the REST API")
    parser.add_argument("--history", action="store_true", help="print transaction history and exit")
    parser.add_argument("--fast", action="store_true", help="skip simulated generation/payment delays")
    args = parser.parse_args(argv)

    settings = load_settings()
    if args.fast:
        settings = settings.model_copy(update={"generation_delay_seconds": 0.0, "payment_delay_seconds": 0.0})
    ctx = make_session_context(settings, remote=args.remote)

    if args.history:
        _print_history(ctx, print)
        return 0

    auth = RemoteAuthService(ctx.remote.client, ctx.store, ctx.remote) if ctx.remote else MockAuthService(ctx.store)
    session = BookingSession(ctx)
    try:
        user = _sign_in(auth, input, print)
        _maybe_complete_profile(auth, user, input, print)
        run_booking(session, input, print)
    except (EOFError, KeyboardInterrupt):
        print("\nGoodbye!")
        if not session.payment_succeeded:
            session.cancel()
        return 130
    except ApiError as exc:
        print(f"Server error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
