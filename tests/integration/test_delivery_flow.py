"""
Module: test_delivery_flow.py
Description: Integration tests for end-to-end event delivery.

Drives RavenClient over the real httpx transport with the collector
mocked by pytest-httpx.
"""

import json

import httpx
import pytest

from raven_client.client import RavenClient
from raven_client.models.event import Level
from raven_client.models.outcome import DrainStatus
from tests.conftest import SAMPLE_DSN

STORE_URL = "https://sentry.example.com/api/42/store/"
MIRROR_URL = "https://mirror.example.com/api/42/store/"


@pytest.fixture
def client(test_settings):
    client = RavenClient(settings=test_settings)
    assert client.initialize(SAMPLE_DSN)
    yield client
    client.close()


class TestDeliveryFlow:
    """Integration tests for delivery through HttpxTransport."""

    def test_event_delivered(self, client, httpx_mock):
        """Test a captured message reaches the collector and the drain completes."""
        httpx_mock.add_response(method="POST", url=STORE_URL, status_code=200,
                                json={"id": "fc6d8c0c43fc4630ad850ee518f1b9d0"})

        event_id = client.capture_message(Level.ERROR, "Payment failed", tags={"region": "eu"})
        outcome = client.wait_for_idle(5.0)

        assert outcome.status in (DrainStatus.DRAINED, DrainStatus.IDLE)
        assert client.coordinator.pending_count == 0

        request = httpx_mock.get_request()
        document = json.loads(request.content)
        assert document["event_id"] == event_id
        assert document["tags"] == {"region": "eu"}
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"] == "raven-client/0.2.0"
        assert request.headers["X-Sentry-Auth"].startswith(
            "Sentry sentry_version=5,sentry_client=raven-client/0.2.0,sentry_timestamp="
        )
        assert request.headers["X-Sentry-Auth"].endswith(",sentry_key=public,sentry_secret=secret")

    def test_redirect_followed(self, client, httpx_mock):
        """Test a redirected event is replayed to the new location once."""
        httpx_mock.add_response(method="POST", url=STORE_URL, status_code=302,
                                headers={"Location": MIRROR_URL})
        httpx_mock.add_response(method="POST", url=MIRROR_URL, status_code=200, json={"id": "abc"})

        client.capture_message(Level.WARNING, "moved")
        outcome = client.wait_for_idle(5.0)

        assert outcome.completed
        assert client.coordinator.pending_count == 0
        first, second = httpx_mock.get_requests()
        assert str(second.url) == MIRROR_URL
        assert second.content == first.content

    def test_collector_error(self, client, httpx_mock):
        """Test a rejected event is dropped without retries."""
        httpx_mock.add_response(method="POST", url=STORE_URL, status_code=500, text="oops")

        client.capture_message(Level.ERROR, "rejected")

        assert client.wait_for_idle(5.0).completed
        assert client.coordinator.pending_count == 0
        assert len(httpx_mock.get_requests()) == 1

    def test_unreachable_collector(self, client, httpx_mock):
        """Test connection errors are absorbed."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"), url=STORE_URL)

        client.capture_message(Level.ERROR, "unreachable")

        assert client.wait_for_idle(5.0).completed
        assert client.coordinator.pending_count == 0

    def test_many_events(self, client, httpx_mock):
        """Test several concurrent deliveries all settle before the drain returns."""
        for _ in range(5):
            httpx_mock.add_response(method="POST", url=STORE_URL, status_code=200, json={"id": "abc"})

        for index in range(5):
            client.capture_message(Level.INFO, f"event {index}")

        assert client.wait_for_idle(5.0).completed
        assert client.coordinator.pending_count == 0
        assert len(httpx_mock.get_requests()) == 5

    def test_self_signed_collector(self, client, httpx_mock):
        """Test the lenient policy delivers through certificate errors."""
        httpx_mock.add_exception(
            httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED] self signed certificate"),
            url=STORE_URL,
        )
        httpx_mock.add_response(method="POST", url=STORE_URL, status_code=200, json={"id": "abc"})

        client.capture_message(Level.ERROR, "self signed")

        assert client.wait_for_idle(5.0).completed
        assert len(httpx_mock.get_requests()) == 2

    def test_strict_tls_policy(self, test_settings, httpx_mock):
        """Test the strict policy fails deliveries with certificate errors."""
        httpx_mock.add_exception(
            httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED] self signed certificate"),
            url=STORE_URL,
        )
        settings = test_settings.model_copy(update={"tls_policy": "strict"})

        with RavenClient(settings=settings) as client:
            assert client.initialize(SAMPLE_DSN)
            client.capture_message(Level.ERROR, "strict")
            assert client.wait_for_idle(5.0).completed

        assert len(httpx_mock.get_requests()) == 1
