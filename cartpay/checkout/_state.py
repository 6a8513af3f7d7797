"""
Checkout state — tagged variant, one dataclass per state.

Every state carries the message a view shows for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

LOADING_CONFIG = "Loading checkout…"
PREPARING = "Preparing checkout…"
PROCESSING = "Processing…"
CREATING_ORDER = "Payment successful! Creating order..."
REDIRECTING = "Order created! Redirecting..."
PAYMENT_FAILED = "Payment failed"
CONTACT_SUPPORT = "Payment succeeded but order creation failed. Please contact support."
EMPTY_CART = "Your cart is empty. Add items before checking out."


class FailureReason(StrEnum):
    CONFIG_UNAVAILABLE = "config_unavailable"
    INTENT_CREATION_FAILED = "intent_creation_failed"
    PAYMENT_DECLINED = "payment_declined"
    ORDER_CREATION_FAILED_AFTER_PAYMENT = "order_creation_failed_after_payment"

    @property
    def retryable(self) -> bool:
        """Whether a fresh attempt is safe. Not after money has been taken."""
        return self is not FailureReason.ORDER_CREATION_FAILED_AFTER_PAYMENT


# ═══════════════════════════════════════════════════════════════════════════════
# States
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Idle:
    message: str = ""


@dataclass(frozen=True, slots=True)
class LoadingConfig:
    message: str = LOADING_CONFIG


@dataclass(frozen=True, slots=True)
class CreatingIntent:
    """Intent requested for amount (minor units) in currency."""

    amount: int
    currency: str
    message: str = PREPARING


@dataclass(frozen=True, slots=True)
class AwaitingConfirmation:
    """Payment form mounted; waiting for the shopper to submit it."""

    amount: int
    currency: str
    publishable_key: str
    message: str = ""


@dataclass(frozen=True, slots=True)
class ConfirmingPayment:
    """
    Confirmation in flight, or finished with a non-final provider status.

    status is None while the provider call is outstanding.
    """

    message: str = PROCESSING
    status: str | None = None


@dataclass(frozen=True, slots=True)
class CreatingOrder:
    payment_id: str
    message: str = CREATING_ORDER


@dataclass(frozen=True, slots=True)
class Succeeded:
    payment_id: str
    message: str = REDIRECTING


@dataclass(frozen=True, slots=True)
class Failed:
    """
    Terminal for the current attempt.

    detail holds operator-facing text (raw server body) and is never
    shown to the shopper.
    """

    reason: FailureReason
    message: str
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class EmptyCart:
    message: str = EMPTY_CART


type CheckoutState = (
    Idle
    | LoadingConfig
    | CreatingIntent
    | AwaitingConfirmation
    | ConfirmingPayment
    | CreatingOrder
    | Succeeded
    | Failed
    | EmptyCart
)

TERMINAL = (Succeeded, Failed, EmptyCart)


def is_terminal(state: CheckoutState) -> bool:
    return isinstance(state, TERMINAL)


__all__ = (
    "LOADING_CONFIG",
    "PREPARING",
    "PROCESSING",
    "CREATING_ORDER",
    "REDIRECTING",
    "PAYMENT_FAILED",
    "CONTACT_SUPPORT",
    "EMPTY_CART",
    "FailureReason",
    "Idle",
    "LoadingConfig",
    "CreatingIntent",
    "AwaitingConfirmation",
    "ConfirmingPayment",
    "CreatingOrder",
    "Succeeded",
    "Failed",
    "EmptyCart",
    "CheckoutState",
    "TERMINAL",
    "is_terminal",
)
