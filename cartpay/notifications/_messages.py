"""
Messages — typed cart events and the bus that carries them.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar

import structlog

from cartpay._types import Unsubscribe

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# CartReplaced — "cart-replaced"
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartReplaced:
    """
    The single-product cart swapped (or refused to swap) its product.

    is_same_product: the shopper tried to add the product already in the
    cart; nothing changed.
    """

    kind: ClassVar[str] = "cart-replaced"

    old_product: str
    new_product: str
    is_same_product: bool

    def to_detail(self) -> dict[str, Any]:
        """Wire payload: {oldProduct, newProduct, isSameProduct}."""
        return {
            "oldProduct": self.old_product,
            "newProduct": self.new_product,
            "isSameProduct": self.is_same_product,
        }

    @classmethod
    def from_detail(cls, detail: dict[str, Any]) -> CartReplaced:
        return cls(
            old_product=str(detail["oldProduct"]),
            new_product=str(detail["newProduct"]),
            is_same_product=bool(detail["isSameProduct"]),
        )


type Message = CartReplaced

MESSAGE_KINDS: dict[str, type[Message]] = {
    CartReplaced.kind: CartReplaced,
}


def decode(kind: str, detail: dict[str, Any]) -> Message:
    """
    Rebuild a typed message from its event name and payload.

    Raises KeyError for unknown kinds.
    """
    return MESSAGE_KINDS[kind].from_detail(detail)


# ═══════════════════════════════════════════════════════════════════════════════
# Message Bus
# ═══════════════════════════════════════════════════════════════════════════════


class MessageBus:
    """
    In-process publish/subscribe, dispatched by message type.

    Handlers run synchronously in subscription order.

    Example:
        bus = MessageBus()
        stop = bus.subscribe(CartReplaced, lambda m: print(m.new_product))
        bus.publish(CartReplaced("Leo", "Virgo", False))
        stop()
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Any], list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe[M](self, kind: type[M], handler: Callable[[M], None]) -> Unsubscribe:
        self._handlers[kind].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers[kind]
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, message: Message) -> int:
        """Deliver to every handler of the message's type. Returns handler count."""
        handlers = tuple(self._handlers.get(type(message), ()))
        logger.debug("message_published", kind=message.kind, handlers=len(handlers))
        for handler in handlers:
            handler(message)
        return len(handlers)


__all__ = (
    "CartReplaced",
    "Message",
    "MESSAGE_KINDS",
    "decode",
    "MessageBus",
)
