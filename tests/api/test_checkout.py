from models.orders import Order
from models.order_items import OrderItem
from models.order_status_events import OrderStatusEvent


async def test_prepaid_checkout_then_payment_webhook(client, session, restaurant, table, menu_item, cart):
    """A customer pays for 2 x 12.99 at table T-4 and the provider confirms twice."""
    response = await client.post("/checkout", json={
        "restaurantId": restaurant.id,
        "tableNumber": "T-4",
        "totalAmount": 25.98,
        "cartItems": cart
    })

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["restaurantSlug"] == "blue-cafe"
    assert len(data["trackCode"]) == 8
    assert data["upiLink"].startswith("upi://pay?pa=bluecafe@okicici")
    assert "am=25.98" in data["upiLink"]
    assert data["paymentQrUrl"].startswith("data:image/png;base64,")

    order_id = data["orderId"]
    status_response = await client.get(f"/public/orders/{data['trackCode']}/status")
    assert status_response.json() == {"status": "payment_pending"}

    for _ in range(2):
        webhook = await client.post("/webhooks/payment", json={
            "orderId": order_id, "paymentStatus": "SUCCESS", "provider_txn_id": "TXN-77"
        })
        assert webhook.status_code == 200

    assert webhook.json()["message"] == "Order already marked paid."

    session.expire_all()
    order = session.query(Order).filter(Order.id == order_id).one()
    assert order.status == "paid"
    assert order.is_prepaid is True
    assert order.cart_data is None
    assert session.query(OrderItem).filter(OrderItem.order_id == order_id).count() == 1
    assert session.query(OrderStatusEvent).filter(OrderStatusEvent.order_id == order_id).count() == 1

    status_response = await client.get(f"/public/orders/{data['trackCode']}/status")
    assert status_response.json() == {"status": "paid"}


async def test_checkout_without_upi(client, other_owner, cart):
    response = await client.post("/checkout", json={
        "restaurantId": other_owner.restaurant.id,
        "tableNumber": "1",
        "totalAmount": 25.98,
        "cartItems": cart
    })

    assert response.status_code == 400
    assert response.json()["detail"] == "This restaurant has not configured online payments."


async def test_checkout_validation(client, restaurant, table):
    response = await client.post("/checkout", json={
        "restaurantId": restaurant.id,
        "tableNumber": "T-4",
        "totalAmount": 10,
        "cartItems": []
    })

    assert response.status_code == 422


async def test_postpaid_order(client, session, restaurant, table, menu_item, cart):
    response = await client.post("/orders/postpaid", json={
        "restaurantId": restaurant.id,
        "tableNumber": "T-4",
        "totalAmount": 25.98,
        "cartItems": cart
    })

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True

    tracking = await client.get(f"/public/orders/{data['trackCode']}")
    assert tracking.status_code == 200
    body = tracking.json()
    assert body["status"] == "pending"
    assert body["restaurantName"] == "Blue Cafe"
    assert body["items"] == [{"name": "Masala Dosa", "quantity": 2, "price": 12.99}]
    assert "upiLink" not in body


async def test_postpaid_order_with_unknown_menu_item(client, session, restaurant, table, menu_item):
    response = await client.post("/orders/postpaid", json={
        "restaurantId": restaurant.id,
        "tableNumber": "T-4",
        "totalAmount": 5,
        "cartItems": [{"id": 999, "price": 5, "quantity": 1}]
    })

    assert response.status_code == 500
    assert response.json()["detail"] == "Could not place your order. Please try again."
    session.expire_all()
    assert session.query(Order).count() == 0


async def test_public_status_unknown_code(client, session):
    response = await client.get("/public/orders/NOPE1234/status")

    assert response.status_code == 404
