import httpx
import pytest
from services.status_poller import fetch_status, poll_order_status, wait_for_payment


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


async def test_fetch_status_reads_status():
    def handler(request):
        assert request.url.path == "/public/orders/K7Q2MX9A/status"
        return httpx.Response(200, json={"status": "paid"})

    async with _client(handler) as client:
        assert await fetch_status(client, "K7Q2MX9A") == "paid"


async def test_fetch_status_failures_return_none():
    def not_found(request):
        return httpx.Response(404, json={"detail": "Order not found"})

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(not_found) as client:
        assert await fetch_status(client, "NOPE") is None

    async with _client(unreachable) as client:
        assert await fetch_status(client, "NOPE") is None


async def test_poll_skips_failed_polls_until_status_changes():
    responses = iter([
        httpx.Response(200, json={"status": "payment_pending"}),
        httpx.Response(500, json={"detail": "Internal server error"}),
        httpx.Response(200, json={"status": "payment_pending"}),
        httpx.Response(200, json={"status": "paid"}),
    ])

    def handler(request):
        return next(responses)

    async with _client(handler) as client:
        assert await poll_order_status(client, "K7Q2MX9A", interval=0) == "paid"


async def test_poll_gives_up_after_max_attempts():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"status": "payment_pending"})

    async with _client(handler) as client:
        with pytest.raises(TimeoutError):
            await poll_order_status(client, "K7Q2MX9A", interval=0, max_attempts=3)

    assert len(calls) == 3


async def test_wait_for_payment_returns_tracking_path():
    def handler(request):
        return httpx.Response(200, json={"status": "failed"})

    async with _client(handler) as client:
        path = await wait_for_payment(client, "blue-cafe", "K7Q2MX9A", interval=0)

    assert path == "/customer-end-pages/blue-cafe/orders/K7Q2MX9A"


async def test_non_json_body_is_a_skipped_poll():
    responses = iter([
        httpx.Response(200, text="<html>Bad gateway</html>"),
        httpx.Response(200, json={"status": "paid"}),
    ])

    def handler(request):
        return next(responses)

    async with _client(handler) as client:
        assert await fetch_status(client, "K7Q2MX9A") is None
        assert await poll_order_status(client, "K7Q2MX9A", interval=0) == "paid"
