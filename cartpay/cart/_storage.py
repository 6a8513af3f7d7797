"""
Cart storage — persisted keyspace of serialized carts.

CartStorage is keyed by cart identity ("cart:<email>", "guest_cart", ...).
All methods are synchronous and return Result for explicit error handling.
"""

from __future__ import annotations

import json
from decimal import InvalidOperation
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from kungfu import Result, Ok, Error

from cartpay.cart._types import LineItem


# ═══════════════════════════════════════════════════════════════════════════════
# Storage Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StorageError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Serialization — the persisted value is a JSON list of line items
# ═══════════════════════════════════════════════════════════════════════════════


def dump_items(items: Sequence[LineItem]) -> str:
    return json.dumps([item.to_dict() for item in items])


def load_items(raw: str) -> Result[tuple[LineItem, ...], StorageError]:
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            return Error(StorageError(f"Expected a list of items, got {type(data).__name__}"))
        return Ok(tuple(LineItem.from_dict(entry) for entry in data))
    except (ValueError, KeyError, TypeError, InvalidOperation) as e:
        return Error(StorageError(f"Corrupt cart payload: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Storage Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CartStorage(Protocol):
    """
    Keyed cart storage protocol.

    Note: Writes are synchronous. The checkout clears the cart between order
    creation and the redirect with no suspension point in between.

    Example — Redis-backed implementation:

        class RedisCartStorage:
            def __init__(self, client: redis.Redis) -> None:
                self.client = client

            def load(self, key: str) -> Result[tuple[LineItem, ...], StorageError]:
                raw = self.client.get(key)
                return load_items(raw) if raw else Ok(())

            def save(self, key: str, items: Sequence[LineItem]) -> Result[None, StorageError]:
                self.client.set(key, dump_items(items))
                return Ok(None)

            def clear(self, key: str) -> Result[bool, StorageError]:
                return Ok(self.client.delete(key) > 0)
    """

    def load(self, key: str) -> Result[tuple[LineItem, ...], StorageError]:
        """Load the cart stored under key. Missing key is Ok(())."""
        ...

    def save(self, key: str, items: Sequence[LineItem]) -> Result[None, StorageError]:
        """Replace the cart stored under key."""
        ...

    def clear(self, key: str) -> Result[bool, StorageError]:
        """Remove the cart under key. Ok(True) if it existed; clearing twice is Ok(False)."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Function-based Storage Builder
# ═══════════════════════════════════════════════════════════════════════════════

type LoadFn = Callable[[str], Result[tuple[LineItem, ...], StorageError]]
type SaveFn = Callable[[str, Sequence[LineItem]], Result[None, StorageError]]
type ClearFn = Callable[[str], Result[bool, StorageError]]


@dataclass(frozen=True)
class FunctionalStorage:
    """
    Storage built from functions.

    Example:
        storage = storage_from(
            load=bridge.load_cart,
            save=bridge.save_cart,
            clear=bridge.remove_cart,
        )
    """

    _load: LoadFn
    _save: SaveFn
    _clear: ClearFn

    def load(self, key: str) -> Result[tuple[LineItem, ...], StorageError]:
        return self._load(key)

    def save(self, key: str, items: Sequence[LineItem]) -> Result[None, StorageError]:
        return self._save(key, items)

    def clear(self, key: str) -> Result[bool, StorageError]:
        return self._clear(key)


def storage_from(load: LoadFn, save: SaveFn, clear: ClearFn) -> FunctionalStorage:
    """Create CartStorage from functions."""
    return FunctionalStorage(_load=load, _save=save, _clear=clear)


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Storage — For Testing / single process
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCartStorage:
    """
    In-memory cart storage.

    Holds the serialized JSON exactly as a browser's localStorage would, so
    corrupt payloads behave the same as in persisted backends.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Result[tuple[LineItem, ...], StorageError]:
        raw = self._entries.get(key)
        if raw is None:
            return Ok(())
        return load_items(raw)

    def save(self, key: str, items: Sequence[LineItem]) -> Result[None, StorageError]:
        self._entries[key] = dump_items(items)
        return Ok(None)

    def clear(self, key: str) -> Result[bool, StorageError]:
        return Ok(self._entries.pop(key, None) is not None)

    def raw(self, key: str) -> str | None:
        """Serialized value under key, for inspection."""
        return self._entries.get(key)

    def keys(self) -> tuple[str, ...]:
        return tuple(self._entries)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "StorageError",
    "dump_items",
    "load_items",
    "CartStorage",
    "FunctionalStorage",
    "storage_from",
    "MemoryCartStorage",
)
