"""
Cart identity — which persisted cart belongs to the current shopper.
"""

from __future__ import annotations

from cartpay.cart._types import Session

GUEST_CART_KEY = "guest_cart"
USER_CART_PREFIX = "cart:"


def resolve_cart_identity(session: Session | None) -> str:
    """
    Storage key of the shopper's persisted cart.

    Precedence (must not change, it decides which cart gets cleared):
        1. authenticated email       → "cart:<email>"
        2. authenticated subject id  → "cart:<sub>"
        3. anonymous                 → "guest_cart"

    Example:
        resolve_cart_identity(Session(email="a@b.se", sub="auth0|1"))  # "cart:a@b.se"
        resolve_cart_identity(None)                                     # "guest_cart"
    """
    if session is None:
        return GUEST_CART_KEY
    if session.email:
        return f"{USER_CART_PREFIX}{session.email}"
    if session.sub:
        return f"{USER_CART_PREFIX}{session.sub}"
    return GUEST_CART_KEY


__all__ = ("GUEST_CART_KEY", "USER_CART_PREFIX", "resolve_cart_identity")
