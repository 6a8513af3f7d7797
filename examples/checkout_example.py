"""
Checkout — cart to paid order, three ways it can go.

Level 5: cartpay.checkout
Level 3: combinators.lift
Level 2: kungfu.Result
"""

from kungfu import Ok, Error

from cartpay import Policy, configure_logging
from cartpay import cart as K
from cartpay import checkout as CO
from cartpay import notifications as N
from cartpay import payments as P
from examples._infra import FakeOrderService, PrintNavigator, ScriptedForm, banner, run


def shopper_cart(storage: K.CartStorage, identity: str, bus: N.MessageBus) -> K.Cart:
    cart = K.Cart(storage, identity, bus=bus)
    cart.replace(K.LineItem.of(1, "Leo", 10.0, qty=2))
    return cart


async def checkout(service: FakeOrderService, form: ScriptedForm, *, change_cart: bool = False) -> None:
    policy = Policy().with_origin("https://shop.demo")
    session = K.Session(token="tok_demo", email="ada@example.com")
    identity = K.resolve_cart_identity(session)
    storage = K.create_storage()

    bus = N.MessageBus()
    toasts = N.NotificationQueue()
    toasts.attach(bus)
    cart = shopper_cart(storage, identity, bus)

    async with service.client() as http:
        orchestrator = CO.CheckoutOrchestrator(
            cart, session, storage, P.Clients.over(http, policy), PrintNavigator(), policy,
        )
        orchestrator.subscribe(lambda s: print(f"  [{type(s).__name__}] {s.message}"))
        await orchestrator.mount()

        if change_cart:
            cart.replace(K.LineItem.of(2, "Virgo", 15.0))
            for toast in toasts.active():
                print(f"  toast: {toast.message}")
            await orchestrator.settle()

        match await orchestrator.submit(form):
            case Ok(CO.Failed(reason=reason, detail=detail)):
                print(f"\n✗ {reason.value} (detail: {detail})")
            case Ok(state):
                print(f"\n✓ {type(state).__name__}")
            case Error(rejected):
                print(f"\n✗ rejected: {rejected.message}")

        print(f"  persisted cart: {storage.load(identity)}")
        orchestrator.teardown()


async def main() -> None:
    configure_logging("WARNING")

    banner("Checkout: happy path")
    await checkout(FakeOrderService(), ScriptedForm())

    banner("Checkout: cart changed before paying")
    await checkout(FakeOrderService(), ScriptedForm(), change_cart=True)

    banner("Checkout: card declined")
    await checkout(FakeOrderService(), ScriptedForm(CO.Confirmation.declined("Your card was declined.")))

    banner("Checkout: paid, but the order failed")
    await checkout(FakeOrderService(fail_orders=True), ScriptedForm())


if __name__ == "__main__":
    run(main)
