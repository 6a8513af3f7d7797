"""
cartpay — cart-to-order checkout with a payment provider.

    from cartpay import cart as K           # Cart store, identity, storage
    from cartpay import payments as P       # Config / intent / order clients
    from cartpay import checkout as CO      # Checkout orchestrator
    from cartpay import notifications as N  # Cart messages and toasts
"""

from cartpay import notifications
from cartpay import cart
from cartpay import payments
from cartpay import checkout
from cartpay._policy import Policy, Retry
from cartpay._settings import Settings
from cartpay._logging import configure_logging
from cartpay._types import Lazy, Amount

__version__ = "0.1.0"

__all__ = (
    "notifications",
    "cart",
    "payments",
    "checkout",
    "Policy",
    "Retry",
    "Settings",
    "configure_logging",
    "Lazy",
    "Amount",
)
