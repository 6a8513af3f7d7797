"""
Checkout — the payment orchestrator and its states.

    from cartpay import checkout as CO

    orchestrator = CO.CheckoutOrchestrator(cart, session, storage, clients, navigator)
    await orchestrator.mount()

    match orchestrator.state:
        case CO.AwaitingConfirmation(amount=amount):
            await orchestrator.submit(form)
        case CO.EmptyCart(message=message) | CO.Failed(message=message):
            show(message)
"""

from cartpay.checkout._state import (
    LOADING_CONFIG,
    PREPARING,
    PROCESSING,
    CREATING_ORDER,
    REDIRECTING,
    PAYMENT_FAILED,
    CONTACT_SUPPORT,
    EMPTY_CART,
    FailureReason,
    Idle,
    LoadingConfig,
    CreatingIntent,
    AwaitingConfirmation,
    ConfirmingPayment,
    CreatingOrder,
    Succeeded,
    Failed,
    EmptyCart,
    CheckoutState,
    TERMINAL,
    is_terminal,
)
from cartpay.checkout._ports import (
    SUCCEEDED,
    Confirmation,
    PaymentForm,
    Navigator,
)
from cartpay.checkout._orchestrator import (
    CheckoutRejected,
    NOT_ACTIVE,
    ALREADY_CONFIRMING,
    NOT_READY,
    NOT_RESTARTABLE,
    CheckoutOrchestrator,
)

__all__ = (
    # Messages
    "LOADING_CONFIG",
    "PREPARING",
    "PROCESSING",
    "CREATING_ORDER",
    "REDIRECTING",
    "PAYMENT_FAILED",
    "CONTACT_SUPPORT",
    "EMPTY_CART",
    # States
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
    # Ports
    "SUCCEEDED",
    "Confirmation",
    "PaymentForm",
    "Navigator",
    # Orchestrator
    "CheckoutRejected",
    "NOT_ACTIVE",
    "ALREADY_CONFIRMING",
    "NOT_READY",
    "NOT_RESTARTABLE",
    "CheckoutOrchestrator",
)
