"""
Cart — in-memory cart state with write-through persistence.

The checkout only reads from it (snapshot + total-change notifications).
Other views mutate it.
"""

from __future__ import annotations

import structlog
from kungfu import Ok, Error

from cartpay._types import Listener, Unsubscribe
from cartpay.cart._storage import CartStorage
from cartpay.cart._types import CartSnapshot, LineItem, ProductId
from cartpay.notifications import CartReplaced, MessageBus

logger = structlog.get_logger(__name__)

MAX_QTY = 99


class Cart:
    """
    Reactive cart store for one shopper identity.

    Every committed mutation is written to storage under the identity key and
    then announced to listeners with the new snapshot.

    Example:
        cart = Cart(MemoryCartStorage(), "guest_cart")
        stop = cart.subscribe(lambda snap: print(snap.total))
        cart.add(LineItem.of(1, "Leo", 10.0, qty=2))  # prints 20.0
    """

    def __init__(
        self,
        storage: CartStorage,
        identity: str,
        bus: MessageBus | None = None,
    ) -> None:
        self._storage = storage
        self._identity = identity
        self._bus = bus
        self._listeners: list[Listener[CartSnapshot]] = []
        self._snapshot = CartSnapshot(self._hydrate())

    def _hydrate(self) -> tuple[LineItem, ...]:
        match self._storage.load(self._identity):
            case Ok(items):
                return items
            case Error(err):
                logger.warning("cart_hydrate_failed", identity=self._identity, error=err.message)
                return ()

    @property
    def identity(self) -> str:
        return self._identity

    def snapshot(self) -> CartSnapshot:
        return self._snapshot

    def subscribe(self, listener: Listener[CartSnapshot]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    def add(self, item: LineItem) -> CartSnapshot:
        """Add item; an existing line for the same product gets its qty bumped."""
        existing = self._snapshot.find(item.id)
        if existing is None:
            items = (*self._snapshot.items, item.with_qty(_clamp(item.qty)))
        else:
            items = tuple(
                i.with_qty(_clamp(i.qty + item.qty)) if i.id == item.id else i
                for i in self._snapshot.items
            )
        return self._commit(items)

    def replace(self, item: LineItem) -> CartSnapshot:
        """
        Single-product add: swap whatever is in the cart for item.

        Publishes CartReplaced when the cart was not empty. Adding the product
        already in the cart leaves the cart untouched.
        """
        current = self._snapshot.items[0] if self._snapshot.items else None
        if current is None:
            return self._commit((item.with_qty(_clamp(item.qty)),))

        same = current.id == item.id
        if self._bus is not None:
            self._bus.publish(CartReplaced(current.name, item.name, is_same_product=same))
        if same:
            return self._snapshot
        return self._commit((item.with_qty(_clamp(item.qty)),))

    def update_qty(self, product_id: ProductId, qty: int) -> CartSnapshot:
        """Set qty for a line. qty < 1 removes it; qty is capped at MAX_QTY."""
        if qty < 1:
            return self.remove(product_id)
        items = tuple(
            i.with_qty(_clamp(qty)) if i.id == product_id else i
            for i in self._snapshot.items
        )
        return self._commit(items)

    def remove(self, product_id: ProductId) -> CartSnapshot:
        return self._commit(tuple(i for i in self._snapshot.items if i.id != product_id))

    def clear(self) -> CartSnapshot:
        return self._commit(())

    def _commit(self, items: tuple[LineItem, ...]) -> CartSnapshot:
        if items == self._snapshot.items:
            return self._snapshot

        self._snapshot = CartSnapshot(items)
        saved = self._storage.save(self._identity, items)
        if isinstance(saved, Error):
            logger.warning("cart_persist_failed", identity=self._identity, error=saved.error.message)

        for listener in tuple(self._listeners):
            listener(self._snapshot)
        return self._snapshot


def _clamp(qty: int) -> int:
    return max(1, min(qty, MAX_QTY))


__all__ = ("Cart", "MAX_QTY")
