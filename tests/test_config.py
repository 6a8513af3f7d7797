"""Tests for Policy, Settings and logging setup."""

import asyncio

import pytest
import structlog
from structlog.testing import capture_logs

from cartpay import Policy, Retry, Settings, configure_logging


class TestPolicy:
    def test_defaults(self):
        policy = Policy()
        assert (policy.currency, policy.provider, policy.minor_unit_exponent) == ("SEK", "stripe", 2)
        assert policy.config_retry == Retry()
        assert not policy.config_retry.enabled

    def test_builders_return_new_policy(self):
        base = Policy()
        policy = base.with_currency("eur").with_origin("https://shop.example/").with_success_path("/thanks")

        assert base.currency == "SEK"
        assert policy.currency == "EUR"
        assert policy.success_url == "https://shop.example/thanks"
        assert policy.return_url == "https://shop.example/orders"

    def test_config_retry(self):
        policy = Policy().with_config_retry(times=3, delay_seconds=0.25)
        assert policy.config_retry == Retry(3, 0.25)
        assert policy.config_retry.enabled

    @pytest.mark.parametrize(("times", "delay"), [(0, 0.0), (2, -1.0)])
    def test_invalid_retry(self, times, delay):
        with pytest.raises(ValueError):
            Retry(times=times, delay_seconds=delay)

    def test_invalid_builder_values(self):
        with pytest.raises(ValueError):
            Policy().with_currency("")
        with pytest.raises(ValueError):
            Policy().with_minor_unit_exponent(-1)


class TestSettings:
    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("CARTPAY_ORIGIN", "https://shop.example/")
        monkeypatch.setenv("CARTPAY_CURRENCY", "nok")
        monkeypatch.setenv("CARTPAY_CONFIG_RETRY_TIMES", "4")

        policy = Settings(_env_file=None).to_policy()

        assert policy.currency == "NOK"
        assert policy.success_url == "https://shop.example/horoscope"
        assert policy.config_retry == Retry(times=4)

    def test_http_client(self, monkeypatch):
        monkeypatch.setenv("CARTPAY_API_BASE_URL", "https://api.shop.example")
        monkeypatch.setenv("CARTPAY_REQUEST_TIMEOUT", "2.5")

        client = Settings(_env_file=None).http_client()

        assert client.base_url.host == "api.shop.example"
        assert client.timeout.read == 2.5
        asyncio.run(client.aclose())


class TestLogging:
    def teardown_method(self):
        structlog.reset_defaults()

    @pytest.mark.parametrize("json", [True, False])
    def test_configure_logging(self, json):
        configure_logging("debug", json=json)
        assert structlog.is_configured()

    def test_order_failure_is_logged_with_detail(self, make_orchestrator, backend, form):
        backend.order_status = 500
        backend.order_text = "db down"

        async def scenario():
            orchestrator = make_orchestrator()
            await orchestrator.mount()
            await orchestrator.submit(form)

        with capture_logs() as logs:
            asyncio.run(scenario())

        [entry] = [e for e in logs if e["event"] == "order_creation_failed_after_payment"]
        assert entry["log_level"] == "error"
        assert entry["payment_id"] == "pi_2000"
        assert entry["identity"] == "cart:ada@example.com"
        assert entry["items"] == [{"productId": 1, "quantity": 2}]
        assert entry["detail"] == "db down"
