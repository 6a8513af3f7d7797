"""Pytest fixtures and fakes for cartpay tests."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any

import httpx
import pytest
from kungfu import Result

from cartpay import Policy
from cartpay.cart import Cart, LineItem, MemoryCartStorage, Session, StorageError, resolve_cart_identity
from cartpay.checkout import CheckoutOrchestrator, Confirmation
from cartpay.payments import CONFIG_PATH, CREATE_INTENT_PATH, PURCHASE_PATH, Clients

ORIGIN = "https://shop.example"
STEP_NAMES = {CONFIG_PATH: "config", CREATE_INTENT_PATH: "intent", PURCHASE_PATH: "order"}


@dataclass
class Call:
    method: str
    path: str
    body: Any
    authorization: str | None


class FakeBackend:
    """Order service behind httpx.MockTransport. Records every request."""

    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.calls: list[Call] = []
        self.config_status = 200
        self.config_body: Any = {"publishableKey": "pk_test_123"}
        self.config_failures = 0
        self.intent_status = 200
        self.order_status = 201
        self.order_text = '{"orderId": 7}'
        self._holds: dict[str, list[asyncio.Event]] = {}

    def hold_next(self, path: str) -> asyncio.Event:
        """Park the next request to path until the returned event is set."""
        gate = asyncio.Event()
        self._holds.setdefault(path, []).append(gate)
        return gate

    def calls_to(self, path: str) -> list[Call]:
        return [c for c in self.calls if c.path == path]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.calls.append(Call(request.method, path, body, request.headers.get("authorization")))
        self.events.append(STEP_NAMES.get(path, path))

        holds = self._holds.get(path)
        if holds:
            await holds.pop(0).wait()

        if path == CONFIG_PATH:
            if self.config_failures > 0:
                self.config_failures -= 1
                return httpx.Response(503, text="unavailable")
            return httpx.Response(self.config_status, json=self.config_body)
        if path == CREATE_INTENT_PATH:
            if self.intent_status >= 400:
                return httpx.Response(self.intent_status, text="intent refused")
            amount = body["amountFiat"]
            return httpx.Response(
                self.intent_status,
                json={"clientSecret": f"secret_{amount}", "paymentId": f"pi_{amount}"},
            )
        if path == PURCHASE_PATH:
            return httpx.Response(self.order_status, text=self.order_text)
        return httpx.Response(404, text="not found")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url="https://api.shop.example",
            transport=httpx.MockTransport(self.handle),
        )


class RecordingStorage(MemoryCartStorage):
    """Memory storage that logs clear() into the shared event list."""

    def __init__(self, events: list[str], initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.events = events

    def clear(self, key: str) -> Result[bool, StorageError]:
        self.events.append("clear")
        return super().clear(key)


class FakeForm:
    """Stands in for the provider widget."""

    def __init__(
        self,
        events: list[str],
        confirmation: Confirmation | None = None,
        error: Exception | None = None,
    ) -> None:
        self.events = events
        self.confirmation = confirmation or Confirmation.success()
        self.error = error
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple[str, str]] = []

    async def confirm(self, client_secret: str, return_url: str) -> Confirmation:
        self.calls.append((client_secret, return_url))
        self.events.append("confirm")
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.confirmation


class FakeNavigator:
    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.urls: list[str] = []

    def replace(self, url: str) -> None:
        self.urls.append(url)
        self.events.append("redirect")


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def events() -> list[str]:
    return []


@pytest.fixture
def backend(events) -> FakeBackend:
    return FakeBackend(events)


@pytest.fixture
def storage(events) -> RecordingStorage:
    return RecordingStorage(events)


@pytest.fixture
def session() -> Session:
    return Session(token="tok_abc", email="ada@example.com")


@pytest.fixture
def policy() -> Policy:
    return Policy().with_origin(ORIGIN)


@pytest.fixture
def navigator(events) -> FakeNavigator:
    return FakeNavigator(events)


@pytest.fixture
def form(events) -> FakeForm:
    return FakeForm(events)


@pytest.fixture
def cart(storage, session) -> Cart:
    shopper_cart = Cart(storage, resolve_cart_identity(session))
    shopper_cart.add(LineItem.of(1, "Leo", 10.0, qty=2))
    return shopper_cart


@pytest.fixture
def make_orchestrator(cart, session, storage, backend, navigator, policy):
    """Build an orchestrator over a fresh AsyncClient, closed at teardown."""
    opened: list[httpx.AsyncClient] = []

    def make(**overrides: Any) -> CheckoutOrchestrator:
        http = backend.client()
        opened.append(http)
        effective = overrides.pop("policy", policy)
        return CheckoutOrchestrator(
            overrides.pop("cart", cart),
            overrides.pop("session", session),
            storage,
            Clients.over(http, effective),
            navigator,
            effective,
        )

    yield make

    for http in opened:
        asyncio.run(http.aclose())
