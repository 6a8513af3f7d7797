"""
Environment settings — loads a Policy and HTTP client from CARTPAY_* variables.
"""

from __future__ import annotations

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict

from cartpay._policy import Policy, Retry


class Settings(BaseSettings):
    """
    Checkout settings read from the environment (or a .env file).

    Example:
        CARTPAY_API_BASE_URL=https://api.shop.example
        CARTPAY_ORIGIN=https://shop.example
        CARTPAY_CONFIG_RETRY_TIMES=3
    """

    model_config = SettingsConfigDict(
        env_prefix="CARTPAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = "http://localhost:8000"
    origin: str = "http://localhost:5173"
    currency: str = "SEK"
    provider: str = "stripe"
    success_path: str = "/horoscope"
    return_path: str = "/orders"
    minor_unit_exponent: int = 2
    request_timeout: float = 10.0
    config_retry_times: int = 1
    config_retry_delay: float = 0.0

    def to_policy(self) -> Policy:
        return Policy(
            currency=self.currency.upper(),
            provider=self.provider,
            origin=self.origin.rstrip("/"),
            success_path=self.success_path,
            return_path=self.return_path,
            minor_unit_exponent=self.minor_unit_exponent,
            config_retry=Retry(
                times=self.config_retry_times,
                delay_seconds=self.config_retry_delay,
            ),
        )

    def http_client(self) -> httpx.AsyncClient:
        """New AsyncClient bound to the API base URL. Caller owns closing it."""
        return httpx.AsyncClient(
            base_url=self.api_base_url,
            timeout=self.request_timeout,
            headers={"Accept": "application/json"},
        )


__all__ = ("Settings",)
