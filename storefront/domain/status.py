# storefront/domain/status.py
from storefront.domain.errors import InvalidTransitionError, ValidationError

ORDER_STATUSES = (
    "pending",
    "processing",
    "confirmed",
    "shipped",
    "delivered",
    "cancelled",
    "refunded",
)

PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")
FULFILLMENT_STATUSES = ("unfulfilled", "partial", "fulfilled")

ORDER_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"processing", "confirmed", "cancelled"}),
    "processing": frozenset({"confirmed", "shipped", "cancelled"}),
    "confirmed": frozenset({"processing", "shipped", "cancelled", "refunded"}),
    "shipped": frozenset({"delivered", "refunded"}),
    "delivered": frozenset({"refunded"}),
    "cancelled": frozenset(),
    "refunded": frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ORDER_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: str, target: str) -> None:
    """Raise unless ``current -> target`` is a legal order status change.

    Re-applying the current status is allowed and treated as a no-op by callers.
    """
    if target not in ORDER_TRANSITIONS:
        raise ValidationError(f"Unknown order status: {target}")
    if current == target:
        return
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)
