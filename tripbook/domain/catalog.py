"""Static transport, payment and destination catalogs."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from tripbook.domain.enums import PaymentMethod, TransportModeId
from tripbook.domain.exceptions import UnknownTransportMode, UnknownTransportOption
from tripbook.domain.models import TransportMode, TransportOption, TrendingPlace

_CATALOG_FILE = Path(__file__).with_name("catalog_data.json")

PAYMENT_REQUIRED_FIELDS: dict[PaymentMethod, tuple[str, ...]] = {
    PaymentMethod.CREDIT_CARD: ("cardNumber", "expiryDate", "cvv", "cardholderName"),
    PaymentMethod.DEBIT_CARD: ("cardNumber", "expiryDate", "cvv", "cardholderName"),
    PaymentMethod.UPI: ("upiId",),
    PaymentMethod.NET_BANKING: ("accountNumber", "ifscCode", "accountHolderName"),
    PaymentMethod.DIGITAL_WALLET: ("walletProvider", "walletNumber"),
}

PAYMENT_METHOD_LABELS: dict[PaymentMethod, str] = {
    PaymentMethod.CREDIT_CARD: "Credit Card",
    PaymentMethod.DEBIT_CARD: "Debit Card",
    PaymentMethod.UPI: "UPI",
    PaymentMethod.NET_BANKING: "Net Banking",
    PaymentMethod.DIGITAL_WALLET: "Digital Wallet",
}


@lru_cache(maxsize=1)
def _catalog() -> dict:
    with open(_CATALOG_FILE, encoding="utf-8") as fh:
        return json.load(fh)


def resolve_mode(mode: str | TransportModeId) -> TransportModeId:
    try:
        return TransportModeId(str(getattr(mode, "value", mode)).strip().lower())
    except ValueError:
        raise UnknownTransportMode(f"unknown transport mode: {mode}") from None


def transport_modes() -> list[TransportMode]:
    return [TransportMode.model_validate(row) for row in _catalog()["transport_modes"]]


def transport_options(mode: str | TransportModeId) -> list[TransportOption]:
    mode_id = resolve_mode(mode)
    rows = _catalog()["transport_options"].get(mode_id.value, [])
    return [TransportOption.model_validate(row) for row in rows]


def find_transport_option(mode: str | TransportModeId, option_id: str) -> TransportOption:
    for option in transport_options(mode):
        if option.id == option_id:
            return option
    raise UnknownTransportOption(f"option {option_id!r} is not offered for {resolve_mode(mode).value}")


def trending_places() -> list[TrendingPlace]:
    return [TrendingPlace.model_validate(row) for row in _catalog()["trending_places"]]


def missing_payment_fields(method: PaymentMethod, details: dict[str, str]) -> list[str]:
    required = PAYMENT_REQUIRED_FIELDS.get(method, ())
    return [name for name in required if not str(details.get(name) or "").strip()]


__all__ = [
    "PAYMENT_METHOD_LABELS",
    "PAYMENT_REQUIRED_FIELDS",
    "find_transport_option",
    "missing_payment_fields",
    "resolve_mode",
    "transport_modes",
    "transport_options",
    "trending_places",
]
