"""
Checkout orchestrator — cart to paid order.

Sequence (each step strictly after the previous one):

    fetch config → create intent → [form] confirm → create order
        → clear persisted cart → full navigation

Every await is followed by a staleness check: a result that arrives after
teardown(), or after its intent was superseded by a cart total change, is
logged and dropped without touching state or listeners.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error

from cartpay._policy import Policy
from cartpay._types import Listener, Unsubscribe
from cartpay.cart import Cart, CartSnapshot, CartStorage, Session, resolve_cart_identity
from cartpay.payments import (
    Clients,
    PaymentConfig,
    PaymentIntent,
    OrderLine,
    order_lines,
    to_minor_units,
)
from cartpay.checkout._ports import Navigator, PaymentForm
from cartpay.checkout._state import (
    CONTACT_SUPPORT,
    PAYMENT_FAILED,
    AwaitingConfirmation,
    CheckoutState,
    ConfirmingPayment,
    CreatingIntent,
    CreatingOrder,
    EmptyCart,
    Failed,
    FailureReason,
    Idle,
    LoadingConfig,
    Succeeded,
    is_terminal,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CheckoutRejected:
    """A submit() or restart() call that was refused without side effects."""

    message: str


NOT_ACTIVE = "Checkout is no longer active"
ALREADY_CONFIRMING = "Payment is already being processed"
NOT_READY = "Checkout is not ready for payment"
NOT_RESTARTABLE = "Only a failed checkout can be restarted"


class CheckoutOrchestrator:
    """
    State machine driving one checkout attempt for one shopper.

    The orchestrator reads the cart (never mutates it) and, after a recorded
    order, clears the shopper's persisted cart directly through storage.

    Example:
        orchestrator = CheckoutOrchestrator(
            cart, session, storage, Clients.over(http, policy), navigator, policy,
        )
        orchestrator.subscribe(render)
        await orchestrator.mount()

        # when the shopper presses "Pay"
        match await orchestrator.submit(form):
            case Ok(state):
                render(state)
            case Error(rejected):
                print(rejected.message)

        # when the page goes away
        orchestrator.teardown()
    """

    def __init__(
        self,
        cart: Cart,
        session: Session | None,
        storage: CartStorage,
        clients: Clients,
        navigator: Navigator,
        policy: Policy = Policy(),
    ) -> None:
        self._cart = cart
        self._session = session or Session()
        self._identity = resolve_cart_identity(session)
        self._storage = storage
        self._clients = clients
        self._navigator = navigator
        self._policy = policy
        self._log = logger.bind(identity=self._identity)

        self._state: CheckoutState = Idle()
        self._listeners: list[Listener[CheckoutState]] = []
        self._active = True
        self._generation = 0
        self._confirming = False
        self._committed_total: Decimal | None = None
        self._config: PaymentConfig | None = None
        self._intent: PaymentIntent | None = None
        self._lines: tuple[OrderLine, ...] = ()
        self._deferred: tuple[int, int, str] | None = None
        self._unsubscribe_cart: Unsubscribe | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    # ───────────────────────────────────────────────────────────────────────────
    # Read side
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def active(self) -> bool:
        return self._active

    @property
    def publishable_key(self) -> str | None:
        return self._config.publishable_key if self._config is not None else None

    @property
    def client_secret(self) -> str | None:
        """
        Secret the payment form may be mounted with.

        Only the current intent's secret, and only while the form is live.
        A superseded intent's secret is never returned.
        """
        if self._intent is None:
            return None
        if not isinstance(self._state, AwaitingConfirmation | ConfirmingPayment):
            return None
        return self._intent.client_secret

    def subscribe(self, listener: Listener[CheckoutState]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ───────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ───────────────────────────────────────────────────────────────────────────

    async def mount(self) -> CheckoutState:
        """
        Start the attempt: Idle → EmptyCart, or Idle → LoadingConfig → ...

        Returns once the intent request issued here has settled. No-op
        unless the orchestrator is Idle.
        """
        self._resume()
        if not self._active or not isinstance(self._state, Idle):
            return self._state

        snapshot = self._cart.snapshot()
        if snapshot.is_empty:
            self._set(EmptyCart())
            return self._state

        self._unsubscribe_cart = self._cart.subscribe(self._on_cart_change)
        self._set(LoadingConfig())

        generation = self._generation
        result = await self._clients.config.fetch_config()
        if not self._is_current(generation, "fetch_config"):
            return self._state

        match result:
            case Ok(config):
                self._config = config
            case Error(e):
                self._fail(FailureReason.CONFIG_UNAVAILABLE, e.message)
                return self._state

        # The cart may have changed while the config was loading.
        snapshot = self._cart.snapshot()
        if snapshot.is_empty:
            self._detach()
            self._set(EmptyCart())
            return self._state

        await self._request_intent(*self._begin_intent(snapshot))
        return self._state

    def teardown(self) -> None:
        """Page went away: drop every outstanding result from now on."""
        if not self._active:
            return
        self._active = False
        self._deferred = None
        self._detach()
        self._log.info("checkout_torn_down", state=type(self._state).__name__)

    async def settle(self) -> CheckoutState:
        """Wait for intent requests spawned by cart changes to finish."""
        self._resume()
        while self._tasks:
            await asyncio.gather(*tuple(self._tasks))
        return self._state

    async def restart(self) -> Result[CheckoutState, CheckoutRejected]:
        """
        Begin a fresh attempt after a retryable failure.

        Refused after OrderCreationFailedAfterPayment: money has been taken
        and a new attempt could charge the shopper again.
        """
        if not self._active:
            return Error(CheckoutRejected(NOT_ACTIVE))

        match self._state:
            case Failed(reason=reason) if not reason.retryable:
                self._log.warning("checkout_restart_refused", reason=reason.value)
                return Error(CheckoutRejected(CONTACT_SUPPORT))
            case Failed():
                pass
            case _:
                return Error(CheckoutRejected(NOT_RESTARTABLE))

        self._generation += 1
        self._config = None
        self._intent = None
        self._committed_total = None
        self._lines = ()
        self._deferred = None
        self._detach()
        self._set(Idle())
        return Ok(await self.mount())

    # ───────────────────────────────────────────────────────────────────────────
    # Payment
    # ───────────────────────────────────────────────────────────────────────────

    async def submit(self, form: PaymentForm) -> Result[CheckoutState, CheckoutRejected]:
        """
        Confirm the current intent through form, then record the order.

        Accepted from AwaitingConfirmation, or from ConfirmingPayment once a
        previous confirmation came back with a non-final status. A second
        submit while a confirmation is in flight is rejected.
        """
        if not self._active:
            return Error(CheckoutRejected(NOT_ACTIVE))
        self._resume()
        if self._confirming:
            return Error(CheckoutRejected(ALREADY_CONFIRMING))

        intent = self._intent
        if intent is None or not isinstance(
            self._state, AwaitingConfirmation | ConfirmingPayment
        ):
            return Error(CheckoutRejected(NOT_READY))

        # The order records the cart the intent was sized for.
        lines = self._lines
        generation = self._generation
        self._confirming = True
        self._set(ConfirmingPayment())
        try:
            outcome = await L.catching_async(
                lambda: form.confirm(intent.client_secret, self._policy.return_url),
                on_error=_decline_text,
            )
        finally:
            self._confirming = False

        if not self._is_current(generation, "confirm_payment"):
            return Ok(self._state)

        match outcome:
            case Error(text):
                self._fail(FailureReason.PAYMENT_DECLINED, text or PAYMENT_FAILED)
            case Ok(confirmation) if confirmation.failed:
                self._fail(
                    FailureReason.PAYMENT_DECLINED,
                    confirmation.error_message or PAYMENT_FAILED,
                )
            case Ok(confirmation) if not confirmation.succeeded:
                status = confirmation.status or "unknown"
                self._set(ConfirmingPayment(message=f"Payment status: {status}", status=status))
            case Ok(confirmation):
                await self._create_order(confirmation.payment_id or intent.payment_id, lines)

        return Ok(self._state)

    async def _create_order(self, payment_id: str, lines: tuple[OrderLine, ...]) -> None:
        self._detach()
        self._set(CreatingOrder(payment_id))

        generation = self._generation
        result = await self._clients.orders.create_order(payment_id, lines, self._session.token)
        if not self._is_current(generation, "create_order", payment_id=payment_id):
            return

        match result:
            case Ok(_):
                self._set(Succeeded(payment_id))
                self._clear_and_redirect()
            case Error(e):
                self._log.error(
                    "order_creation_failed_after_payment",
                    payment_id=payment_id,
                    items=[line.to_payload() for line in lines],
                    detail=e.detail,
                    error=e.message,
                )
                self._fail(
                    FailureReason.ORDER_CREATION_FAILED_AFTER_PAYMENT,
                    CONTACT_SUPPORT,
                    detail=e.detail or e.message,
                )

    def _clear_and_redirect(self) -> None:
        cleared = self._storage.clear(self._identity)
        if isinstance(cleared, Error):
            self._log.error("cart_clear_failed", error=cleared.error.message)
        url = self._policy.success_url
        self._log.info("checkout_redirect", url=url)
        self._navigator.replace(url)

    # ───────────────────────────────────────────────────────────────────────────
    # Intent
    # ───────────────────────────────────────────────────────────────────────────

    def _begin_intent(self, snapshot: CartSnapshot) -> tuple[int, int, str]:
        self._generation += 1
        self._intent = None
        self._deferred = None
        self._committed_total = snapshot.total
        self._lines = order_lines(snapshot)
        amount = to_minor_units(snapshot.total, self._policy.minor_unit_exponent)
        currency = self._policy.currency
        self._set(CreatingIntent(amount, currency))
        return self._generation, amount, currency

    async def _request_intent(self, generation: int, amount: int, currency: str) -> None:
        result = await self._clients.intents.create_intent(amount, currency, self._session.token)
        if not self._is_current(generation, "create_intent", amount=amount):
            return

        match result:
            case Ok(intent):
                self._intent = intent
                key = self._config.publishable_key if self._config is not None else ""
                self._set(AwaitingConfirmation(amount, currency, key))
            case Error(e):
                self._fail(FailureReason.INTENT_CREATION_FAILED, e.message)

    def _on_cart_change(self, snapshot: CartSnapshot) -> None:
        if not self._active or snapshot.total == self._committed_total:
            return

        match self._state:
            case LoadingConfig():
                # mount() reads the snapshot again once the config is in
                return
            case CreatingIntent() | AwaitingConfirmation():
                self._supersede(snapshot)
            case _:
                self._log.info(
                    "cart_change_ignored",
                    state=type(self._state).__name__,
                    total=str(snapshot.total),
                )

    def _supersede(self, snapshot: CartSnapshot) -> None:
        self._log.info(
            "intent_superseded",
            old_total=str(self._committed_total),
            new_total=str(snapshot.total),
        )
        if snapshot.is_empty:
            self._generation += 1
            self._intent = None
            self._deferred = None
            self._detach()
            self._set(EmptyCart())
            return

        loop = _running_loop()
        request = self._begin_intent(snapshot)
        if loop is None:
            # Mutated outside the event loop; the next settle/submit/mount sends it.
            self._deferred = request
            self._log.info("intent_request_deferred", amount=request[1])
            return
        self._spawn(loop, self._request_intent(*request))

    def _resume(self) -> None:
        if self._deferred is None:
            return
        request, self._deferred = self._deferred, None
        if not self._active or request[0] != self._generation:
            return
        self._spawn(asyncio.get_running_loop(), self._request_intent(*request))

    # ───────────────────────────────────────────────────────────────────────────
    # Plumbing
    # ───────────────────────────────────────────────────────────────────────────

    def _spawn(
        self, loop: asyncio.AbstractEventLoop, coro: Coroutine[Any, Any, None]
    ) -> None:
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_current(self, generation: int, effect: str, **context: Any) -> bool:
        if self._active and generation == self._generation:
            return True
        self._log.info(
            "stale_effect_discarded",
            effect=effect,
            torn_down=not self._active,
            **context,
        )
        return False

    def _set(self, state: CheckoutState) -> None:
        if not self._active:
            return
        previous = self._state
        self._state = state
        self._log.debug(
            "checkout_transition",
            from_state=type(previous).__name__,
            to_state=type(state).__name__,
        )
        if is_terminal(state):
            self._log.info("checkout_finished", state=type(state).__name__, message=state.message)
        for listener in tuple(self._listeners):
            listener(state)

    def _fail(self, reason: FailureReason, message: str, detail: str | None = None) -> None:
        self._detach()
        self._intent = None
        self._deferred = None
        self._log.warning("checkout_failed", reason=reason.value, message=message)
        self._set(Failed(reason, message, detail))

    def _detach(self) -> None:
        if self._unsubscribe_cart is not None:
            self._unsubscribe_cart()
            self._unsubscribe_cart = None


def _decline_text(e: Exception) -> str:
    return str(e)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


__all__ = (
    "CheckoutRejected",
    "NOT_ACTIVE",
    "ALREADY_CONFIRMING",
    "NOT_READY",
    "NOT_RESTARTABLE",
    "CheckoutOrchestrator",
)
