"""
Notifications — typed cart events and a self-expiring toast queue.

    from cartpay import notifications as N

    bus = N.MessageBus()
    queue = N.NotificationQueue()
    queue.attach(bus)

    bus.publish(N.CartReplaced("Leo", "Virgo", is_same_product=False))
    queue.active()  # one toast, gone after 3 seconds
"""

from cartpay.notifications._messages import (
    CartReplaced,
    Message,
    MESSAGE_KINDS,
    decode,
    MessageBus,
)
from cartpay.notifications._queue import (
    DEFAULT_TTL,
    Toast,
    describe,
    NotificationQueue,
)

__all__ = (
    "CartReplaced",
    "Message",
    "MESSAGE_KINDS",
    "decode",
    "MessageBus",
    "DEFAULT_TTL",
    "Toast",
    "describe",
    "NotificationQueue",
)
