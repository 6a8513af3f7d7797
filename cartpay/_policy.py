"""
Checkout policy — behavior configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


# ═══════════════════════════════════════════════════════════════════════════════
# Retry — transport retry for safe reads
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Retry:
    """
    Retry settings applied via combinators.flow().retry(...).

    Only used for the payment config fetch. Intent and order creation are
    never retried: a repeated POST may reserve funds twice or record a
    duplicate order.
    """

    times: int = 1
    delay_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.times < 1:
            raise ValueError("Retry.times must be >= 1")
        if self.delay_seconds < 0:
            raise ValueError("Retry.delay_seconds must be >= 0")

    @property
    def enabled(self) -> bool:
        return self.times > 1


# ═══════════════════════════════════════════════════════════════════════════════
# Policy — Full Configuration
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Checkout policy configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        policy = (
            Policy()
            .with_currency("SEK")
            .with_origin("https://shop.example")
            .with_success_path("/horoscope")
            .with_config_retry(times=3, delay_seconds=0.2)
        )

    Note: Immutable — each method returns new Policy.
    """

    currency: str = "SEK"
    provider: str = "stripe"
    origin: str = ""
    success_path: str = "/horoscope"
    return_path: str = "/orders"
    # Minor units per major unit as a power of ten: 2 for cents/öre.
    minor_unit_exponent: int = 2
    config_retry: Retry = Retry()

    def with_currency(self, currency: str) -> Policy:
        """Set the ISO currency code sent with every intent."""
        if not currency:
            raise ValueError("currency must be non-empty")
        return replace(self, currency=currency.upper())

    def with_provider(self, provider: str) -> Policy:
        """Set the payment provider name sent to the backend."""
        return replace(self, provider=provider)

    def with_origin(self, origin: str) -> Policy:
        """
        Set the site origin used to build absolute URLs.

        Example:
            .with_origin("https://shop.example")
        """
        return replace(self, origin=origin.rstrip("/"))

    def with_success_path(self, path: str) -> Policy:
        """Set where the shopper lands after a recorded order."""
        return replace(self, success_path=path)

    def with_return_path(self, path: str) -> Policy:
        """Set where the provider sends the shopper after an off-site step."""
        return replace(self, return_path=path)

    def with_minor_unit_exponent(self, exponent: int) -> Policy:
        if exponent < 0:
            raise ValueError("minor_unit_exponent must be >= 0")
        return replace(self, minor_unit_exponent=exponent)

    def with_config_retry(self, *, times: int, delay_seconds: float = 0.0) -> Policy:
        """
        Retry the config fetch on failure.

        Example:
            .with_config_retry(times=3, delay_seconds=0.5)
        """
        return replace(self, config_retry=Retry(times=times, delay_seconds=delay_seconds))

    @property
    def success_url(self) -> str:
        return f"{self.origin}{self.success_path}"

    @property
    def return_url(self) -> str:
        return f"{self.origin}{self.return_path}"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Retry",
    "Policy",
)
