"""
Cart — line items, identity-keyed persistence and the reactive cart store.

    from cartpay import cart as K

    storage = K.MemoryCartStorage()
    identity = K.resolve_cart_identity(K.Session(email="ada@example.com"))
    shopper_cart = K.Cart(storage, identity)
    shopper_cart.add(K.LineItem.of(1, "Leo", 10.0, qty=2))

    storage.clear(identity)  # what the checkout does after a recorded order
"""

from cartpay.cart._types import (
    ProductId,
    LineItem,
    CartSnapshot,
    Session,
)
from cartpay.cart._identity import (
    GUEST_CART_KEY,
    USER_CART_PREFIX,
    resolve_cart_identity,
)
from cartpay.cart._storage import (
    StorageError,
    dump_items,
    load_items,
    CartStorage,
    FunctionalStorage,
    storage_from,
    MemoryCartStorage,
)
from cartpay.cart._sqlalchemy import (
    CartBase,
    CartTable,
    SQLAlchemyCartStorage,
    create_storage,
)
from cartpay.cart._store import Cart, MAX_QTY

__all__ = (
    # Types
    "ProductId",
    "LineItem",
    "CartSnapshot",
    "Session",
    # Identity
    "GUEST_CART_KEY",
    "USER_CART_PREFIX",
    "resolve_cart_identity",
    # Storage
    "StorageError",
    "dump_items",
    "load_items",
    "CartStorage",
    "FunctionalStorage",
    "storage_from",
    "MemoryCartStorage",
    # SQLAlchemy
    "CartBase",
    "CartTable",
    "SQLAlchemyCartStorage",
    "create_storage",
    # Store
    "Cart",
    "MAX_QTY",
)
