"""
Payment clients — thin httpx wrappers returning lazy Results.

Every public call is lazy: nothing hits the network until the result is
awaited. Failures come back in the error channel, never as exceptions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from combinators import flow, lift as L

from cartpay._policy import Policy, Retry
from cartpay._types import Lazy
from cartpay.payments._types import (
    PaymentConfig,
    PaymentIntent,
    OrderLine,
    ConfigUnavailable,
    IntentCreationFailed,
    OrderCreationFailed,
)

logger = structlog.get_logger(__name__)

CONFIG_PATH = "/api/orders/payments/config"
CREATE_INTENT_PATH = "/api/orders/payments/create-intent"
PURCHASE_PATH = "/api/orders/purchase"


def bearer(token: str | None) -> dict[str, str]:
    """Authorization header for token, or no header at all."""
    return {"Authorization": f"Bearer {token}"} if token else {}


def _json_object(response: httpx.Response) -> dict[str, Any]:
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Config Client
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentConfigClient:
    """
    GET /api/orders/payments/config → {publishableKey}

    Safe to retry; see Retry.
    """

    def __init__(self, http: httpx.AsyncClient, retry: Retry = Retry()) -> None:
        self._http = http
        self._retry = retry

    def fetch_config(self) -> Lazy[PaymentConfig, ConfigUnavailable]:
        fetch = L.catching_async(self._fetch, on_error=ConfigUnavailable.from_exception)
        if not self._retry.enabled:
            return fetch
        return (
            flow(fetch)
            .retry(times=self._retry.times, delay_seconds=self._retry.delay_seconds)
            .compile()
        )

    async def _fetch(self) -> PaymentConfig:
        response = await self._http.get(CONFIG_PATH)
        if not response.is_success:
            raise ConfigUnavailable(
                f"Could not load payment config (HTTP {response.status_code})"
            )
        key = _json_object(response).get("publishableKey")
        if not isinstance(key, str) or not key:
            raise ConfigUnavailable("Missing Stripe publishable key")
        logger.debug("payment_config_loaded")
        return PaymentConfig(publishable_key=key)


# ═══════════════════════════════════════════════════════════════════════════════
# Intent Client
# ═══════════════════════════════════════════════════════════════════════════════


class IntentClient:
    """POST /api/orders/payments/create-intent → {clientSecret, paymentId}"""

    def __init__(self, http: httpx.AsyncClient, provider: str = "stripe") -> None:
        self._http = http
        self._provider = provider

    def create_intent(
        self,
        amount: int,
        currency: str,
        token: str | None = None,
    ) -> Lazy[PaymentIntent, IntentCreationFailed]:
        """
        Reserve amount (minor units, >= 1) in currency with the provider.

        Example:
            result = await intents.create_intent(2000, "SEK", session.token)
            match result:
                case Ok(intent):
                    form.mount(intent.client_secret)
                case Error(e):
                    show(e.message)
        """
        http = self._http
        provider = self._provider

        async def create() -> PaymentIntent:
            if amount < 1:
                raise IntentCreationFailed(
                    f"Amount must be at least one minor unit, got {amount}"
                )
            response = await http.post(
                CREATE_INTENT_PATH,
                json={"provider": provider, "amountFiat": amount, "currencyFiat": currency},
                headers=bearer(token),
            )
            if not response.is_success:
                raise IntentCreationFailed(
                    f"Failed to create payment intent (HTTP {response.status_code})"
                )
            body = _json_object(response)
            secret = body.get("clientSecret")
            if not isinstance(secret, str) or not secret:
                raise IntentCreationFailed("No client secret in response")
            payment_id = body.get("paymentId")
            if not isinstance(payment_id, str | int) or isinstance(payment_id, bool) or payment_id == "":
                raise IntentCreationFailed("No payment id in response")
            logger.debug("payment_intent_created", amount=amount, currency=currency)
            return PaymentIntent(
                client_secret=secret,
                payment_id=str(payment_id),
                amount=amount,
                currency=currency,
            )

        return L.catching_async(create, on_error=IntentCreationFailed.from_exception)


# ═══════════════════════════════════════════════════════════════════════════════
# Order Client
# ═══════════════════════════════════════════════════════════════════════════════


class OrderClient:
    """
    POST /api/orders/purchase {items: [{productId, quantity}], paymentId}

    Never retried: whether the backend deduplicates on paymentId is unknown.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    def create_order(
        self,
        payment_id: str,
        lines: Sequence[OrderLine],
        token: str | None = None,
    ) -> Lazy[None, OrderCreationFailed]:
        http = self._http
        payload = {
            "items": [line.to_payload() for line in lines],
            "paymentId": payment_id,
        }

        async def submit() -> None:
            response = await http.post(PURCHASE_PATH, json=payload, headers=bearer(token))
            if not response.is_success:
                detail = response.text
                raise OrderCreationFailed(f"Failed to create order: {detail}", detail=detail)
            logger.debug("order_created", payment_id=payment_id, lines=len(payload["items"]))

        return L.catching_async(submit, on_error=OrderCreationFailed.from_exception)


# ═══════════════════════════════════════════════════════════════════════════════
# Clients — the three wrappers over one AsyncClient
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Clients:
    config: PaymentConfigClient
    intents: IntentClient
    orders: OrderClient

    @classmethod
    def over(cls, http: httpx.AsyncClient, policy: Policy = Policy()) -> Clients:
        """
        Build all clients on one shared AsyncClient.

        Example:
            async with settings.http_client() as http:
                clients = Clients.over(http, settings.to_policy())
        """
        return cls(
            config=PaymentConfigClient(http, policy.config_retry),
            intents=IntentClient(http, policy.provider),
            orders=OrderClient(http),
        )


__all__ = (
    "CONFIG_PATH",
    "CREATE_INTENT_PATH",
    "PURCHASE_PATH",
    "bearer",
    "PaymentConfigClient",
    "IntentClient",
    "OrderClient",
    "Clients",
)
