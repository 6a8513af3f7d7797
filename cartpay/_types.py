"""
Core types for cartpay.

Checkout-wide aliases over kungfu.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

from kungfu import LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail. Runs when awaited."""

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Amount = Decimal | float | int | str
"""Anything that converts losslessly to Decimal through str()."""

# ═══════════════════════════════════════════════════════════════════════════════
# Listener / Unsubscribe
# ═══════════════════════════════════════════════════════════════════════════════

type Listener[T] = Callable[[T], None]
"""Synchronous observer callback."""

type Unsubscribe = Callable[[], None]
"""Detaches a previously registered listener."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Lazy",
    "Amount",
    "Listener",
    "Unsubscribe",
)
