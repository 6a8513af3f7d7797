"""
Notification queue — short-lived toasts with timed auto-expiry.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

from cartpay._types import Unsubscribe
from cartpay.notifications._messages import CartReplaced, MessageBus

DEFAULT_TTL = timedelta(seconds=3)


# ═══════════════════════════════════════════════════════════════════════════════
# Toast
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Toast:
    """One queued notification."""

    id: int
    message: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def describe(event: CartReplaced) -> str:
    """Shopper-facing text for a cart replacement."""
    if event.is_same_product:
        return (
            "Only one horoscope per purchase. "
            f'Cart already contains "{event.old_product}".'
        )
    return f'Cart updated: "{event.old_product}" replaced with "{event.new_product}"'


# ═══════════════════════════════════════════════════════════════════════════════
# Notification Queue
# ═══════════════════════════════════════════════════════════════════════════════


class NotificationQueue:
    """
    FIFO of toasts; each entry disappears ttl after it was pushed.

    Expiry is evaluated lazily against the injected clock, so there are no
    timers to cancel.

    Example:
        queue = NotificationQueue()
        queue.attach(bus)
        bus.publish(CartReplaced("Leo", "Virgo", False))
        queue.active()  # (Toast(id=1, message='Cart updated: ...'),)
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl.total_seconds()
        self._clock = clock
        self._ids = itertools.count(1)
        self._toasts: list[Toast] = []

    def attach(self, bus: MessageBus) -> Unsubscribe:
        """Start showing toasts for cart events published on bus."""
        return bus.subscribe(CartReplaced, self._on_cart_replaced)

    def _on_cart_replaced(self, event: CartReplaced) -> None:
        self.push(describe(event))

    def push(self, message: str) -> Toast:
        toast = Toast(
            id=next(self._ids),
            message=message,
            expires_at=self._clock() + self._ttl,
        )
        self._toasts.append(toast)
        return toast

    def active(self) -> tuple[Toast, ...]:
        """Unexpired toasts, oldest first. Drops expired ones."""
        now = self._clock()
        self._toasts = [t for t in self._toasts if not t.is_expired(now)]
        return tuple(self._toasts)

    def dismiss(self, toast_id: int) -> bool:
        for i, toast in enumerate(self._toasts):
            if toast.id == toast_id:
                del self._toasts[i]
                return True
        return False

    def __len__(self) -> int:
        return len(self.active())


__all__ = (
    "DEFAULT_TTL",
    "Toast",
    "describe",
    "NotificationQueue",
)
