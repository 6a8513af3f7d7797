"""
Ports — what the orchestrator needs from the page it runs in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

SUCCEEDED = "succeeded"


@dataclass(frozen=True, slots=True)
class Confirmation:
    """
    Outcome of a provider confirmation.

    failed=True means the provider reported an error; error_message is its
    text when it gave one. Otherwise status is the intent status it reported.
    """

    status: str | None = None
    payment_id: str | None = None
    error_message: str | None = None
    failed: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.failed and self.status == SUCCEEDED

    @classmethod
    def success(cls, payment_id: str | None = None) -> Confirmation:
        return cls(status=SUCCEEDED, payment_id=payment_id)

    @classmethod
    def declined(cls, message: str | None = None) -> Confirmation:
        return cls(error_message=message, failed=True)

    @classmethod
    def pending(cls, status: str, payment_id: str | None = None) -> Confirmation:
        """Any non-final status, e.g. "processing" or "requires_action"."""
        return cls(status=status, payment_id=payment_id)


class PaymentForm(Protocol):
    """The embedded provider widget."""

    async def confirm(self, client_secret: str, return_url: str) -> Confirmation: ...


class Navigator(Protocol):
    """Full navigation; the destination rebuilds its state from storage."""

    def replace(self, url: str) -> None: ...


__all__ = (
    "SUCCEEDED",
    "Confirmation",
    "PaymentForm",
    "Navigator",
)
