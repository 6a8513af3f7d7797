"""Tests for cart messages and the notification queue."""

from datetime import timedelta

import pytest

from cartpay.cart import Cart, LineItem, MemoryCartStorage
from cartpay.notifications import (
    CartReplaced,
    MessageBus,
    NotificationQueue,
    decode,
    describe,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestCartReplaced:
    def test_wire_detail(self):
        message = CartReplaced("Leo", "Virgo", is_same_product=False)
        assert message.kind == "cart-replaced"
        assert message.to_detail() == {"oldProduct": "Leo", "newProduct": "Virgo", "isSameProduct": False}

    def test_decode(self):
        detail = {"oldProduct": "Leo", "newProduct": "Leo", "isSameProduct": True}
        assert decode("cart-replaced", detail) == CartReplaced("Leo", "Leo", True)

    def test_decode_unknown_kind(self):
        with pytest.raises(KeyError):
            decode("cart-exploded", {})

    def test_describe(self):
        assert describe(CartReplaced("Leo", "Virgo", False)) == 'Cart updated: "Leo" replaced with "Virgo"'
        assert describe(CartReplaced("Leo", "Leo", True)) == (
            'Only one horoscope per purchase. Cart already contains "Leo".'
        )


class TestMessageBus:
    def test_publish_reaches_subscribers_in_order(self):
        bus = MessageBus()
        seen = []
        bus.subscribe(CartReplaced, lambda m: seen.append(("a", m.new_product)))
        bus.subscribe(CartReplaced, lambda m: seen.append(("b", m.new_product)))

        delivered = bus.publish(CartReplaced("Leo", "Virgo", False))

        assert delivered == 2
        assert seen == [("a", "Virgo"), ("b", "Virgo")]

    def test_unsubscribe(self):
        bus = MessageBus()
        seen = []
        stop = bus.subscribe(CartReplaced, seen.append)
        stop()

        assert bus.publish(CartReplaced("Leo", "Virgo", False)) == 0
        assert seen == []


class TestNotificationQueue:
    def test_entries_expire_after_ttl(self):
        clock = FakeClock()
        queue = NotificationQueue(ttl=timedelta(seconds=3), clock=clock)
        queue.push("hello")

        clock.now += 2.9
        assert [t.message for t in queue.active()] == ["hello"]

        clock.now += 0.1
        assert queue.active() == ()
        assert len(queue) == 0

    def test_each_entry_has_its_own_deadline(self):
        clock = FakeClock()
        queue = NotificationQueue(clock=clock)
        queue.push("first")
        clock.now += 2
        queue.push("second")
        clock.now += 1.5

        assert [t.message for t in queue.active()] == ["second"]

    def test_dismiss(self):
        queue = NotificationQueue(clock=FakeClock())
        toast = queue.push("hello")

        assert queue.dismiss(toast.id)
        assert not queue.dismiss(toast.id)
        assert len(queue) == 0

    def test_ids_increase(self):
        queue = NotificationQueue(clock=FakeClock())
        assert [queue.push(m).id for m in "abc"] == [1, 2, 3]

    def test_cart_replacement_becomes_toast(self):
        bus = MessageBus()
        queue = NotificationQueue(clock=FakeClock())
        queue.attach(bus)
        cart = Cart(MemoryCartStorage(), "guest_cart", bus=bus)

        cart.replace(LineItem.of(1, "Leo", 10.0))
        cart.replace(LineItem.of(2, "Virgo", 10.0))

        assert [t.message for t in queue.active()] == ['Cart updated: "Leo" replaced with "Virgo"']

    def test_detached_queue_stops_listening(self):
        bus = MessageBus()
        queue = NotificationQueue(clock=FakeClock())
        detach = queue.attach(bus)
        detach()

        bus.publish(CartReplaced("Leo", "Virgo", False))

        assert len(queue) == 0
