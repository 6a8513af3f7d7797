"""
Payment types — provider config, intents, order lines and client errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Self

from cartpay.cart._types import CartSnapshot, ProductId


# ═══════════════════════════════════════════════════════════════════════════════
# Provider Config / Intent
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentConfig:
    """Public provider configuration needed to mount the payment form."""

    publishable_key: str


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    """
    Provider-side reservation for exactly one amount + currency.

    Never reused once the cart total changes; a new intent is created instead.
    """

    client_secret: str
    payment_id: str
    amount: int
    currency: str


# ═══════════════════════════════════════════════════════════════════════════════
# Order Submission
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderLine:
    product_id: ProductId
    quantity: int

    def to_payload(self) -> dict[str, Any]:
        return {"productId": self.product_id, "quantity": self.quantity}


def order_lines(snapshot: CartSnapshot) -> tuple[OrderLine, ...]:
    """Cart items as order lines, in cart order."""
    return tuple(OrderLine(item.id, item.qty) for item in snapshot.items)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentsError(Exception):
    """Base for client-side payment failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @classmethod
    def from_exception(cls, e: Exception) -> Self:
        """Keep errors of this type, wrap anything else (transport, JSON, ...)."""
        if isinstance(e, cls):
            return e
        return cls(str(e) or type(e).__name__)


class ConfigUnavailable(PaymentsError):
    """Payment config could not be loaded or had no publishable key."""


class IntentCreationFailed(PaymentsError):
    """Provider intent could not be created."""


class OrderCreationFailed(PaymentsError):
    """
    The backend refused (or never acknowledged) the order.

    detail is the raw server body, meant for support and reconciliation
    rather than for the shopper.
    """

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(message)
        self.detail = detail

    @classmethod
    def from_exception(cls, e: Exception) -> Self:
        if isinstance(e, cls):
            return e
        text = str(e) or type(e).__name__
        return cls(f"Failed to create order: {text}", detail=text)


__all__ = (
    "PaymentConfig",
    "PaymentIntent",
    "OrderLine",
    "order_lines",
    "PaymentsError",
    "ConfigUnavailable",
    "IntentCreationFailed",
    "OrderCreationFailed",
)
