"""
SQLAlchemy integration — persisted cart keyspace in a relational table.

Usage:
    1. Create the table (or include CartBase.metadata in your migrations):

        storage = create_storage("sqlite:///carts.db")

    2. Or bring your own session factory:

        engine = create_engine(url)
        CartBase.metadata.create_all(engine)
        storage = SQLAlchemyCartStorage(sessionmaker(engine, expire_on_commit=False))

    3. Use it as any CartStorage:

        storage.save("cart:ada@example.com", items)
        storage.clear("cart:ada@example.com")
"""

from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from kungfu import Result, Ok, Error

from cartpay.cart._storage import StorageError, dump_items, load_items
from cartpay.cart._types import LineItem


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════


class CartBase(DeclarativeBase):
    pass


class CartTable(CartBase):
    """
    One row per cart identity.

    items holds the same JSON list a browser keeps in localStorage.
    """

    __tablename__ = "carts"

    key: Mapped[str] = mapped_column(String(320), primary_key=True)
    items: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# SQLAlchemy Storage
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyCartStorage:
    """
    CartStorage over a synchronous SQLAlchemy session factory.

    Each call runs in its own short session and commits before returning,
    so clear() is durable by the time the checkout redirects.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def load(self, key: str) -> Result[tuple[LineItem, ...], StorageError]:
        try:
            with self._session_factory() as session:
                row = session.get(CartTable, key)
                if row is None:
                    return Ok(())
                return load_items(row.items)
        except Exception as e:
            return Error(StorageError(f"Failed to load cart {key}: {e}", e))

    def save(self, key: str, items: Sequence[LineItem]) -> Result[None, StorageError]:
        try:
            with self._session_factory() as session:
                session.merge(
                    CartTable(
                        key=key,
                        items=dump_items(items),
                        updated_at=datetime.now(timezone.utc),
                    )
                )
                session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StorageError(f"Failed to save cart {key}: {e}", e))

    def clear(self, key: str) -> Result[bool, StorageError]:
        try:
            with self._session_factory() as session:
                row = session.get(CartTable, key)
                if row is None:
                    return Ok(False)
                session.delete(row)
                session.commit()
                return Ok(True)
        except Exception as e:
            return Error(StorageError(f"Failed to clear cart {key}: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


def create_storage(url: str = "sqlite:///:memory:") -> SQLAlchemyCartStorage:
    """Create engine + carts table and return a storage bound to it."""
    engine = create_engine(url, echo=False)
    CartBase.metadata.create_all(engine)
    return SQLAlchemyCartStorage(sessionmaker(engine, expire_on_commit=False))


__all__ = (
    "CartBase",
    "CartTable",
    "SQLAlchemyCartStorage",
    "create_storage",
)
