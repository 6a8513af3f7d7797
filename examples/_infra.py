"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import itertools
import json
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field

import httpx

from cartpay.checkout import Confirmation


# Fake order service
@dataclass(slots=True)
class FakeOrderService:
    """Backend stand-in served through httpx.MockTransport."""

    publishable_key: str = "pk_test_demo"
    fail_orders: bool = False
    orders: list[dict] = field(default_factory=list)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    async def handle(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.01)
        path = request.url.path
        if path == "/api/orders/payments/config":
            return httpx.Response(200, json={"publishableKey": self.publishable_key})
        if path == "/api/orders/payments/create-intent":
            body = json.loads(request.content)
            n = next(self._ids)
            print(f"  → intent #{n} for {body['amountFiat']} {body['currencyFiat']}")
            return httpx.Response(200, json={"clientSecret": f"cs_{n}", "paymentId": f"pi_{n}"})
        if path == "/api/orders/purchase":
            if self.fail_orders:
                return httpx.Response(503, text='{"error": "inventory unavailable"}')
            self.orders.append(json.loads(request.content))
            return httpx.Response(201, json={"orderId": len(self.orders)})
        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url="https://api.demo", transport=httpx.MockTransport(self.handle))


# Page stand-ins
@dataclass(slots=True)
class ScriptedForm:
    """Payment widget that answers with a fixed confirmation."""

    confirmation: Confirmation = field(default_factory=Confirmation.success)

    async def confirm(self, client_secret: str, return_url: str) -> Confirmation:
        await asyncio.sleep(0.01)
        print(f"  → confirm {client_secret} (return to {return_url})")
        return self.confirmation


class PrintNavigator:
    def replace(self, url: str) -> None:
        print(f"  → navigate {url}")


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
