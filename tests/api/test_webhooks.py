from core.config import settings


async def test_failed_payment(client, session, pending_order):
    response = await client.post("/webhooks/payment", json={
        "orderId": pending_order.id, "paymentStatus": "FAILURE"
    })

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Payment failure recorded."}
    session.expire_all()
    assert pending_order.status == "failed"


async def test_unknown_order(client, session):
    response = await client.post("/webhooks/payment", json={"orderId": 999, "paymentStatus": "SUCCESS"})

    assert response.status_code == 404


async def test_missing_fields(client, session):
    response = await client.post("/webhooks/payment", json={"paymentStatus": "SUCCESS"})

    assert response.status_code == 422


async def test_secret_required_when_configured(client, session, pending_order, monkeypatch):
    monkeypatch.setattr(settings, "PAYMENT_WEBHOOK_SECRET", "whsec-test")
    body = {"orderId": pending_order.id, "paymentStatus": "SUCCESS"}

    rejected = await client.post("/webhooks/payment", json=body, headers={"X-Webhook-Secret": "wrong"})
    assert rejected.status_code == 401

    accepted = await client.post("/webhooks/payment", json=body, headers={"X-Webhook-Secret": "whsec-test"})
    assert accepted.status_code == 200


async def test_paid_webhook_notifies_subscribers(client, session, pending_order, push_calls):
    await client.post("/push/subscribe", json={
        "orderId": pending_order.id,
        "subscription": {"endpoint": "https://push.example.com/abc", "keys": {"p256dh": "BNcR", "auth": "tBHI"}}
    })

    response = await client.post("/webhooks/payment", json={
        "orderId": pending_order.id, "paymentStatus": "SUCCESS"
    })

    assert response.status_code == 200
    assert [call["endpoint"] for call in push_calls.sent] == ["https://push.example.com/abc"]
    assert '"Payment received"' in push_calls.sent[0]["data"]
