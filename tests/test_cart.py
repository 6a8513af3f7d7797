"""Tests for cart types, identity resolution and the Cart store."""

from decimal import Decimal

import pytest

from cartpay.cart import (
    GUEST_CART_KEY,
    MAX_QTY,
    Cart,
    CartSnapshot,
    LineItem,
    MemoryCartStorage,
    Session,
    resolve_cart_identity,
)
from cartpay.notifications import CartReplaced, MessageBus


class TestResolveCartIdentity:
    def test_email_wins(self):
        session = Session(email="ada@example.com", sub="auth0|42")
        assert resolve_cart_identity(session) == "cart:ada@example.com"

    def test_subject_when_no_email(self):
        assert resolve_cart_identity(Session(sub="auth0|42")) == "cart:auth0|42"

    def test_guest_without_session(self):
        assert resolve_cart_identity(None) == GUEST_CART_KEY

    def test_guest_with_anonymous_session(self):
        assert resolve_cart_identity(Session(token="tok")) == "guest_cart"


class TestSnapshot:
    def test_total_is_sum_of_subtotals(self):
        snapshot = CartSnapshot((
            LineItem.of(1, "Leo", "10.00", qty=2),
            LineItem.of(2, "Virgo", "0.10", qty=3),
        ))
        assert snapshot.total == Decimal("20.30")

    def test_empty_when_no_items(self):
        assert CartSnapshot().is_empty

    def test_empty_when_total_is_zero(self):
        assert CartSnapshot((LineItem.of(1, "Gift", 0),)).is_empty

    def test_checkoutable(self):
        assert CartSnapshot((LineItem.of(1, "Leo", 10),)).is_checkoutable
        assert not CartSnapshot((LineItem.of(1, "Leo", 10, qty=0),)).is_checkoutable

    def test_line_item_dict_shape(self):
        item = LineItem.of(7, "Leo", 10.5, qty=2)
        assert item.to_dict() == {"id": 7, "name": "Leo", "price": 10.5, "qty": 2}
        assert LineItem.from_dict(item.to_dict()) == item


class TestCart:
    def test_add_persists_and_notifies(self):
        storage = MemoryCartStorage()
        cart = Cart(storage, "cart:ada@example.com")
        seen = []
        cart.subscribe(seen.append)

        cart.add(LineItem.of(1, "Leo", 10.0, qty=2))

        assert [s.total for s in seen] == [Decimal("20.0")]
        assert storage.load("cart:ada@example.com").unwrap() == cart.snapshot().items

    def test_add_same_product_merges_quantity(self):
        cart = Cart(MemoryCartStorage(), GUEST_CART_KEY)
        cart.add(LineItem.of(1, "Leo", 10.0))
        cart.add(LineItem.of(1, "Leo", 10.0, qty=2))

        [item] = cart.snapshot().items
        assert item.qty == 3

    def test_hydrates_from_storage(self):
        storage = MemoryCartStorage()
        Cart(storage, GUEST_CART_KEY).add(LineItem.of(1, "Leo", 10.0))

        assert Cart(storage, GUEST_CART_KEY).snapshot().total == Decimal("10.0")

    def test_corrupt_storage_hydrates_empty(self):
        storage = MemoryCartStorage({GUEST_CART_KEY: "{not json"})
        assert Cart(storage, GUEST_CART_KEY).snapshot().is_empty

    @pytest.mark.parametrize(("qty", "expected"), [(5, 5), (0, None), (-1, None), (500, MAX_QTY)])
    def test_update_qty(self, qty, expected):
        cart = Cart(MemoryCartStorage(), GUEST_CART_KEY)
        cart.add(LineItem.of(1, "Leo", 10.0))

        cart.update_qty(1, qty)

        item = cart.snapshot().find(1)
        assert (item.qty if item else None) == expected

    def test_no_op_mutation_does_not_notify(self):
        cart = Cart(MemoryCartStorage(), GUEST_CART_KEY)
        cart.add(LineItem.of(1, "Leo", 10.0))
        seen = []
        cart.subscribe(seen.append)

        cart.update_qty(1, 1)
        cart.remove(99)

        assert seen == []

    def test_unsubscribe(self):
        cart = Cart(MemoryCartStorage(), GUEST_CART_KEY)
        seen = []
        stop = cart.subscribe(seen.append)
        stop()
        stop()

        cart.add(LineItem.of(1, "Leo", 10.0))

        assert seen == []


class TestReplace:
    def setup_method(self):
        self.bus = MessageBus()
        self.published = []
        self.bus.subscribe(CartReplaced, self.published.append)
        self.cart = Cart(MemoryCartStorage(), GUEST_CART_KEY, bus=self.bus)

    def test_into_empty_cart_publishes_nothing(self):
        self.cart.replace(LineItem.of(1, "Leo", 10.0))

        assert self.published == []
        assert [i.name for i in self.cart.snapshot().items] == ["Leo"]

    def test_swaps_product(self):
        self.cart.replace(LineItem.of(1, "Leo", 10.0))
        self.cart.replace(LineItem.of(2, "Virgo", 12.0))

        assert self.published == [CartReplaced("Leo", "Virgo", is_same_product=False)]
        assert [i.name for i in self.cart.snapshot().items] == ["Virgo"]

    def test_same_product_keeps_cart(self):
        self.cart.replace(LineItem.of(1, "Leo", 10.0))
        before = self.cart.snapshot()

        self.cart.replace(LineItem.of(1, "Leo", 10.0))

        assert self.published == [CartReplaced("Leo", "Leo", is_same_product=True)]
        assert self.cart.snapshot() is before
