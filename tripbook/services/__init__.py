"""Service layer public exports."""

from tripbook.services.history_service import (
    fetch_remote_bookings,
    list_local_transactions,
    transaction_history,
)

__all__ = ["fetch_remote_bookings", "list_local_transactions", "transaction_history"]
