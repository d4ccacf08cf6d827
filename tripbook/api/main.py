"""FastAPI backend: auth sessions, transactions, booked plans, saved places and the transport catalog."""

from __future__ import annotations

import json
import logging
import secrets
import threading
import time
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from tripbook import __version__
from tripbook.api.schemas import (
    BookedPlanCreateRequest,
    BookedPlanStatusRequest,
    HealthResponse,
    LanguageRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    SavedPlaceCheckResponse,
    SavedPlaceCreateRequest,
    SavedPlaceDeleteRequest,
    TransactionCreateRequest,
    TransactionStatusRequest,
    TransportBookingRequest,
)
from tripbook.config.settings import Settings, load_settings
from tripbook.domain import catalog
from tripbook.domain.enums import PaymentStatus
from tripbook.domain.exceptions import DomainError, UnknownTransportMode, UnknownTransportOption
from tripbook.domain.models import BookedPlan, ProfileCompletion, SavedPlace, Transaction
from tripbook.infrastructure.rate_limiter import RateLimiter, get_rate_limiter
from tripbook.persistence.models import DuplicateRecord, NewUser, UserRecord
from tripbook.persistence.repository import TravelRepository, get_repository
from tripbook.security.passwords import hash_password, new_session_token, verify_password
from tripbook.security.redact import redact_sensitive

_api_logger = logging.getLogger("tripbook.api")

load_dotenv()


def _now_iso(offset_seconds: float = 0.0) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time() + offset_seconds))


# ── middleware ──────────────────────────────────────


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Throttles POST requests per client address."""

    def __init__(self, app, limiter: RateLimiter):
        super().__init__(app)
        self._limiter = limiter

    async def dispatch(self, request: Request, call_next):
        if request.method != "POST":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        if not self._limiter.allow(client_ip):
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests, please try again later"},
                headers={"Retry-After": str(self._limiter.retry_after(client_ip))},
            )
        return await call_next(request)


# ── dependencies ────────────────────────────────────


def get_repo(request: Request) -> TravelRepository:
    state = request.app.state
    with state.repository_lock:
        if state.repository is None:
            state.repository = get_repository(state.settings.db_path)
    return state.repository


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        return ""
    scheme, _, value = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return value.strip()


def require_user(
    authorization: Optional[str] = Header(default=None),
    repo: TravelRepository = Depends(get_repo),
) -> UserRecord:
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")
    user = repo.get_user_by_session_token(token, _now_iso())
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return user


def _user_payload(record: UserRecord) -> dict[str, Any]:
    return record.to_user().model_dump(mode="json", by_alias=True, exclude={"password"})


def _reload_user(repo: TravelRepository, user_id: int) -> dict[str, Any]:
    record = repo.get_user(user_id)
    if record is None:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_payload(record)


def _start_session(request: Request, repo: TravelRepository, record: UserRecord) -> dict[str, Any]:
    days = request.app.state.settings.session_days
    token = new_session_token()
    repo.update_user_session(record.id, token, _now_iso(days * 24 * 60 * 60))
    return {"token": token, "user": _user_payload(record)}


# ── auth ────────────────────────────────────────────

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@auth_router.post("/register")
def register(req: RegisterRequest, request: Request, repo: TravelRepository = Depends(get_repo)):
    if repo.get_user_by_username(req.username) is not None:
        raise HTTPException(status_code=400, detail="Username already exists")
    try:
        record = repo.create_user(
            NewUser(
                username=req.username,
                email=req.email or req.username,
                name=req.name or req.username,
                password_hash=hash_password(req.password),
                role=req.role,
                created_at=_now_iso(),
            )
        )
    except DuplicateRecord:
        raise HTTPException(status_code=400, detail="Username already exists") from None
    _api_logger.info("registered user_id=%s role=%s", record.id, record.role.value)
    return _start_session(request, repo, record)


@auth_router.post("/login")
def login(req: LoginRequest, request: Request, repo: TravelRepository = Depends(get_repo)):
    record = repo.get_user_by_username(req.username)
    if record is None or not verify_password(req.password, record.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    _api_logger.info("login user_id=%s", record.id)
    return _start_session(request, repo, record)


@auth_router.get("/me")
def me(user: UserRecord = Depends(require_user)):
    return _user_payload(user)


@auth_router.post("/logout", response_model=MessageResponse)
def logout(user: UserRecord = Depends(require_user), repo: TravelRepository = Depends(get_repo)):
    repo.update_user_session(user.id, None, None)
    return MessageResponse(message="Logged out successfully")


@auth_router.post("/activity", response_model=MessageResponse)
def activity(user: UserRecord = Depends(require_user), repo: TravelRepository = Depends(get_repo)):
    repo.update_user_activity(user.id, _now_iso())
    return MessageResponse(message="Activity updated")


@auth_router.patch("/language")
def update_language(
    req: LanguageRequest,
    user: UserRecord = Depends(require_user),
    repo: TravelRepository = Depends(get_repo),
):
    repo.update_user_language(user.id, req.language)
    return _reload_user(repo, user.id)


@auth_router.post("/complete-profile")
def complete_profile(
    profile: ProfileCompletion,
    user: UserRecord = Depends(require_user),
    repo: TravelRepository = Depends(get_repo),
):
    repo.update_user_profile(user.id, profile)
    return _reload_user(repo, user.id)


@auth_router.post("/mark-prompt-shown")
def mark_prompt_shown(user: UserRecord = Depends(require_user), repo: TravelRepository = Depends(get_repo)):
    repo.mark_profile_prompt_shown(user.id)
    return _reload_user(repo, user.id)


# ── transactions ────────────────────────────────────

transactions_router = APIRouter(prefix="/api", tags=["transactions"])


@transactions_router.post("/transactions")
def create_transaction(req: TransactionCreateRequest, repo: TravelRepository = Depends(get_repo)):
    txn = repo.create_transaction(Transaction(**req.model_dump(mode="json"), created_at=_now_iso()))
    _api_logger.info(
        "transaction stored id=%s transaction_id=%s status=%s",
        txn.id,
        txn.transaction_id,
        txn.payment_status,
    )
    return txn.to_storage()


@transactions_router.get("/transactions")
def list_transactions(user: UserRecord = Depends(require_user), repo: TravelRepository = Depends(get_repo)):
    return [txn.to_storage() for txn in repo.list_transactions(user_id=user.id)]


@transactions_router.get("/transactions/{txn_id}")
def get_transaction(txn_id: int, repo: TravelRepository = Depends(get_repo)):
    txn = repo.get_transaction(txn_id)
    if txn is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return txn.to_storage()


@transactions_router.patch("/transactions/{txn_id}/status")
def update_transaction_status(
    txn_id: int,
    req: TransactionStatusRequest,
    repo: TravelRepository = Depends(get_repo),
):
    txn = repo.update_transaction_status(txn_id, req.status.value)
    if txn is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return txn.to_storage()


@transactions_router.post("/transport-bookings")
def create_transport_booking(
    req: TransportBookingRequest,
    user: UserRecord = Depends(require_user),
    repo: TravelRepository = Depends(get_repo),
):
    option = catalog.find_transport_option(req.mode, req.option_id)
    details = {
        "serviceName": option.provider,
        "description": f"{req.mode.value} {option.seat_class}".strip(),
        "mode": req.mode.value,
        "option": option.to_storage(),
    }
    txn = repo.create_transaction(
        Transaction(
            transaction_id=f"TXN-{int(time.time() * 1000)}-{secrets.token_hex(2).upper()}",
            amount=f"{option.price:.2f}",
            payment_method=req.payment_method.value,
            payment_status=PaymentStatus.SUCCESS.value,
            booking_type="transport",
            booking_details=json.dumps(details, ensure_ascii=False),
            user_id=user.id,
            created_at=_now_iso(),
        )
    )
    _api_logger.info("transport booking stored id=%s option=%s", txn.id, option.id)
    return txn.to_storage()


@transactions_router.get("/transport-bookings")
def list_transport_bookings(user: UserRecord = Depends(require_user), repo: TravelRepository = Depends(get_repo)):
    return [txn.to_storage() for txn in repo.list_transactions(user_id=user.id, booking_type="transport")]


# ── booked plans ────────────────────────────────────

plans_router = APIRouter(prefix="/api/booked-plans", tags=["booked-plans"])


@plans_router.post("")
def create_booked_plan(
    req: BookedPlanCreateRequest,
    user: UserRecord = Depends(require_user),
    repo: TravelRepository = Depends(get_repo),
):
    now = _now_iso()
    plan = repo.create_booked_plan(BookedPlan(**req.model_dump(), user_id=user.id, created_at=now, updated_at=now))
    _api_logger.info("booked plan stored id=%s user_id=%s total=%s", plan.id, user.id, plan.total_amount)
    return plan.to_storage()


@plans_router.get("")
def list_booked_plans(user: UserRecord = Depends(require_user), repo: TravelRepository = Depends(get_repo)):
    return [plan.to_storage() for plan in repo.list_booked_plans(user.id)]


@plans_router.get("/{plan_id}")
def get_booked_plan(
    plan_id: int,
    user: UserRecord = Depends(require_user),
    repo: TravelRepository = Depends(get_repo),
):
    plan = repo.get_booked_plan(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    if plan.user_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    return plan.to_storage()


@plans_router.patch("/{plan_id}/status")
def update_booked_plan_status(
    plan_id: int,
    req: BookedPlanStatusRequest,
    user: UserRecord = Depends(require_user),
    repo: TravelRepository = Depends(get_repo),
):
    existing = repo.get_booked_plan(plan_id)
    # another user's plan is reported as missing
    if existing is None or existing.user_id != user.id:
        raise HTTPException(status_code=404, detail="Plan not found")
    plan = repo.update_booked_plan_status(plan_id, req.status.value, _now_iso())
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan.to_storage()


# ── saved places ────────────────────────────────────

places_router = APIRouter(prefix="/api/saved-places", tags=["saved-places"])


@places_router.get("")
def list_saved_places(
    user_id: Optional[int] = Query(default=None, alias="userId"),
    repo: TravelRepository = Depends(get_repo),
):
    if user_id is None:
        raise HTTPException(status_code=400, detail="userId is required")
    return [place.to_storage() for place in repo.list_saved_places(user_id)]


@places_router.post("")
def create_saved_place(req: SavedPlaceCreateRequest, repo: TravelRepository = Depends(get_repo)):
    place = repo.create_saved_place(SavedPlace(**req.model_dump(mode="json"), created_at=_now_iso()))
    return place.to_storage()


@places_router.delete("")
def remove_saved_place(
    req: Optional[SavedPlaceDeleteRequest] = None,
    repo: TravelRepository = Depends(get_repo),
):
    if req is None or req.user_id is None or not req.place_id:
        raise HTTPException(status_code=400, detail="userId and placeId are required")
    repo.remove_saved_place(req.user_id, req.place_id)
    return {"success": True}


@places_router.get("/check", response_model=SavedPlaceCheckResponse)
def check_saved_place(
    user_id: Optional[int] = Query(default=None, alias="userId"),
    place_id: Optional[str] = Query(default=None, alias="placeId"),
    repo: TravelRepository = Depends(get_repo),
):
    if user_id is None or not place_id:
        raise HTTPException(status_code=400, detail="userId and placeId are required")
    return SavedPlaceCheckResponse(is_saved=repo.is_place_saved(user_id, place_id))


# ── catalog ─────────────────────────────────────────

catalog_router = APIRouter(prefix="/api", tags=["catalog"])


@catalog_router.get("/transport/modes")
def transport_modes():
    return [mode.to_storage() for mode in catalog.transport_modes()]


@catalog_router.get("/transport/options/{mode}")
def transport_options(mode: str):
    return [option.to_storage() for option in catalog.transport_options(mode)]


@catalog_router.get("/trending-places")
def trending_places():
    return [place.to_storage() for place in catalog.trending_places()]


# ── error bodies ────────────────────────────────────


def _error(status_code: int, message: str, headers: Optional[dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else str(err.get("msg", "invalid")))
    return _error(400, "; ".join(messages) or "Invalid request")


async def _duplicate_error(request: Request, exc: DuplicateRecord) -> JSONResponse:
    return _error(400, str(exc))


async def _domain_error(request: Request, exc: DomainError) -> JSONResponse:
    status = 404 if isinstance(exc, (UnknownTransportMode, UnknownTransportOption)) else 400
    return _error(status, str(exc))


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    _api_logger.error("%s %s failed: %s", request.method, request.url.path, redact_sensitive(str(exc)))
    return _error(500, "Internal server error")


# ── app factory ─────────────────────────────────────


def create_app(
    settings: Optional[Settings] = None,
    *,
    repository: Optional[TravelRepository] = None,
    limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(
        title="tripbook",
        version=__version__,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.repository = repository
    app.state.repository_lock = threading.Lock()

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=limiter
        or get_rate_limiter(settings.rate_limit_max, settings.rate_limit_window, settings.redis_url),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(DuplicateRecord, _duplicate_error)
    app.add_exception_handler(DomainError, _domain_error)
    app.add_exception_handler(Exception, _unhandled_error)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok", version=__version__)

    app.include_router(auth_router)
    app.include_router(transactions_router)
    app.include_router(plans_router)
    app.include_router(places_router)
    app.include_router(catalog_router)
    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run("tripbook.api.main:app", host="127.0.0.1", port=8000)


if __name__ == "__main__":
    main()
