"""
Cart types — line items, snapshots and the shopper session.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from cartpay._types import Amount

# ═══════════════════════════════════════════════════════════════════════════════
# IDs
# ═══════════════════════════════════════════════════════════════════════════════

type ProductId = str | int


# ═══════════════════════════════════════════════════════════════════════════════
# Line Item
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    """
    One product line in the cart.

    unit_price is a Decimal in major units (kronor, dollars). Use LineItem.of()
    to build one from a float or string price.
    """

    id: ProductId
    name: str
    unit_price: Decimal
    qty: int

    @classmethod
    def of(cls, id: ProductId, name: str, price: Amount, qty: int = 1) -> LineItem:
        return cls(id=id, name=name, unit_price=Decimal(str(price)), qty=qty)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.qty

    def with_qty(self, qty: int) -> LineItem:
        return LineItem(id=self.id, name=self.name, unit_price=self.unit_price, qty=qty)

    # Persisted shape: {"id", "name", "price", "qty"}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.unit_price),
            "qty": self.qty,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LineItem:
        return cls.of(data["id"], data["name"], data["price"], int(data["qty"]))


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """Immutable view of the cart at one instant. total = Σ unit_price·qty."""

    items: tuple[LineItem, ...] = ()

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal(0))

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to pay for."""
        return not self.items or self.total <= 0

    @property
    def is_checkoutable(self) -> bool:
        return not self.is_empty and all(item.qty >= 1 for item in self.items)

    def find(self, product_id: ProductId) -> LineItem | None:
        for item in self.items:
            if item.id == product_id:
                return item
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Session:
    """
    Authenticated shopper as exposed by the session provider.

    All fields are optional: the provider may know a token but no email, or
    only an OIDC subject id.
    """

    token: str | None = None
    email: str | None = None
    sub: str | None = None


__all__ = (
    "ProductId",
    "LineItem",
    "CartSnapshot",
    "Session",
)
