"""
Payments — provider config, intents and order submission over HTTP.

    from cartpay import payments as P

    async with settings.http_client() as http:
        clients = P.Clients.over(http, policy)
        config = await clients.config.fetch_config()
        intent = await clients.intents.create_intent(P.to_minor_units(total), "SEK")
"""

from cartpay.payments._types import (
    PaymentConfig,
    PaymentIntent,
    OrderLine,
    order_lines,
    PaymentsError,
    ConfigUnavailable,
    IntentCreationFailed,
    OrderCreationFailed,
)
from cartpay.payments._amount import to_minor_units
from cartpay.payments._client import (
    CONFIG_PATH,
    CREATE_INTENT_PATH,
    PURCHASE_PATH,
    bearer,
    PaymentConfigClient,
    IntentClient,
    OrderClient,
    Clients,
)

__all__ = (
    # Types
    "PaymentConfig",
    "PaymentIntent",
    "OrderLine",
    "order_lines",
    # Errors
    "PaymentsError",
    "ConfigUnavailable",
    "IntentCreationFailed",
    "OrderCreationFailed",
    # Amount
    "to_minor_units",
    # Clients
    "CONFIG_PATH",
    "CREATE_INTENT_PATH",
    "PURCHASE_PATH",
    "bearer",
    "PaymentConfigClient",
    "IntentClient",
    "OrderClient",
    "Clients",
)
