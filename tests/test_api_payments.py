import hashlib
import hmac
import json

import pytest
from bson import ObjectId

from app.core import razorpay_client
from conftest import SHIPPING_ADDRESS, auth_header, insert_user, run


def sign(secret, message):
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


@pytest.fixture
def razorpay_calls(monkeypatch):
    calls = {"orders": []}

    async def fake_create_order(amount, receipt, currency="INR", notes=None):
        calls["orders"].append({"amount": amount, "receipt": receipt, "notes": notes})
        return {"id": "order_rzp_1", "amount": int(round(amount * 100)), "currency": currency, "receipt": receipt}

    async def fake_fetch_payment(payment_id):
        return {
            "id": payment_id,
            "method": "upi",
            "vpa": "asha@okbank",
            "amount": 168000,
            "currency": "INR",
            "status": "captured",
            "created_at": 1700000000,
        }

    monkeypatch.setattr(razorpay_client, "create_order", fake_create_order)
    monkeypatch.setattr(razorpay_client, "fetch_payment", fake_fetch_payment)
    return calls


@pytest.fixture
def cart(make_product):
    return [
        make_product(name="Handloom Scarf", price=500, gst_rate=0),
        make_product(name="Silk Shirt", price=1000, gst_rate=18),
    ]


def checkout(client, headers, cart, amount=1680):
    return client.post("/api/payment/create-order", headers=headers, json={
        "amount": amount,
        "items": [{"product": str(p["_id"]), "quantity": 1} for p in cart],
        "shipping_address": SHIPPING_ADDRESS,
    })


def test_payment_config(client):
    response = client.get("/api/payment/config")
    assert response.json() == {"success": True, "key_id": "rzp_test_key", "currency": "INR"}


def test_create_payment_order(client, db, cart, user_headers, razorpay_calls):
    response = checkout(client, user_headers, cart)
    assert response.status_code == 200
    data = response.json()
    assert data["order"]["id"] == "order_rzp_1"
    assert data["order"]["amount"] == 168000
    assert data["key_id"] == "rzp_test_key"
    assert data["totals"]["total_price"] == 1680
    assert data["user"]["email"] == "asha@example.com"

    sent = razorpay_calls["orders"][0]
    assert sent["amount"] == 1680
    assert sent["receipt"].startswith("ORD-")
    assert len(sent["receipt"]) <= 40

    order = run(db.orders.find_one({"_id": ObjectId(data["order_id"])}))
    assert order["razorpay_order_id"] == "order_rzp_1"
    assert order["payment_status"] == "pending"

    # stock is only taken once the payment completes
    stored = run(db.products.find_one({"_id": cart[1]["_id"]}))
    assert stored["quantity"] == 10


def test_create_payment_order_amount_mismatch(client, cart, user_headers, razorpay_calls):
    response = checkout(client, user_headers, cart, amount=1500)
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Amount mismatch")
    assert razorpay_calls["orders"] == []


def test_create_payment_order_requires_login(client, cart, razorpay_calls):
    response = checkout(client, {}, cart)
    assert response.status_code == 401


def test_verify_payment(client, db, cart, user_headers, razorpay_calls):
    order_id = checkout(client, user_headers, cart).json()["order_id"]
    signature = sign("test_key_secret", "order_rzp_1|pay_1")

    response = client.post("/api/payment/verify", headers=user_headers, json={
        "razorpay_order_id": "order_rzp_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": signature,
        "order_id": order_id,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["order"]["status"] == "processing"
    assert data["order"]["payment_status"] == "completed"
    assert data["order"]["total_amount"] == 1680

    order = run(db.orders.find_one({"_id": ObjectId(order_id)}))
    assert order["is_paid"] is True
    assert order["razorpay_payment_id"] == "pay_1"
    assert order["payment_details"]["method"] == "upi"
    assert order["payment_details"]["amount"] == 1680

    stored = run(db.products.find_one({"_id": cart[1]["_id"]}))
    assert stored["quantity"] == 9


def test_verify_rejects_bad_signature(client, cart, user_headers, razorpay_calls):
    order_id = checkout(client, user_headers, cart).json()["order_id"]

    response = client.post("/api/payment/verify", headers=user_headers, json={
        "razorpay_order_id": "order_rzp_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": "forged",
        "order_id": order_id,
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid payment signature"


def test_verify_rejects_other_users_order(client, db, cart, user_headers, razorpay_calls):
    order_id = checkout(client, user_headers, cart).json()["order_id"]
    stranger = auth_header(insert_user(db, email="other@example.com"))

    response = client.post("/api/payment/verify", headers=stranger, json={
        "razorpay_order_id": "order_rzp_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": sign("test_key_secret", "order_rzp_1|pay_1"),
        "order_id": order_id,
    })
    assert response.status_code == 403


def post_webhook(client, event, secret="test_webhook_secret"):
    body = json.dumps(event)
    return client.post(
        "/api/payment/webhook",
        content=body,
        headers={"Content-Type": "application/json", "X-Razorpay-Signature": sign(secret, body)},
    )


def captured_event(payment_id="pay_1"):
    return {
        "event": "payment.captured",
        "payload": {"payment": {"entity": {
            "id": payment_id,
            "order_id": "order_rzp_1",
            "method": "card",
            "amount": 168000,
            "currency": "INR",
            "status": "captured",
        }}},
    }


def test_webhook_rejects_bad_signature(client, cart, user_headers, razorpay_calls):
    response = post_webhook(client, captured_event(), secret="wrong")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid webhook signature"


def test_webhook_payment_captured_is_idempotent(client, db, cart, user_headers, razorpay_calls):
    checkout(client, user_headers, cart)

    assert post_webhook(client, captured_event()).json() == {"success": True}
    assert post_webhook(client, captured_event()).json() == {"success": True}

    order = run(db.orders.find_one({"razorpay_order_id": "order_rzp_1"}))
    assert order["payment_status"] == "completed"
    assert order["status"] == "processing"

    stored = run(db.products.find_one({"_id": cart[1]["_id"]}))
    assert stored["quantity"] == 9


def test_webhook_payment_failed(client, db, cart, user_headers, razorpay_calls):
    checkout(client, user_headers, cart)

    response = post_webhook(client, {
        "event": "payment.failed",
        "payload": {"payment": {"entity": {
            "id": "pay_2",
            "order_id": "order_rzp_1",
            "error_description": "Card declined",
        }}},
    })
    assert response.status_code == 200

    order = run(db.orders.find_one({"razorpay_order_id": "order_rzp_1"}))
    assert order["payment_status"] == "failed"
    assert order["status"] == "cancelled"
    assert order["status_history"][-1]["note"] == "Card declined"


def test_webhook_unhandled_event(client):
    response = post_webhook(client, {"event": "refund.created", "payload": {}})
    assert response.status_code == 200


def test_webhook_without_entity_is_rejected(client):
    response = post_webhook(client, {"event": "payment.captured", "payload": {}})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid webhook payload"

    response = post_webhook(client, {"event": "order.paid", "payload": {"order": {"entity": None}}})
    assert response.status_code == 400


def test_webhook_rejects_non_utf8_body(client):
    body = b'{"event": "payment.captured", "note": "\xff\xfe"}'
    signature = hmac.new(b"test_webhook_secret", body, hashlib.sha256).hexdigest()

    response = client.post(
        "/api/payment/webhook",
        content=body,
        headers={"Content-Type": "application/json", "X-Razorpay-Signature": signature},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid webhook payload"


def test_payment_completes_when_stock_ran_out(client, db, cart, user_headers, razorpay_calls):
    order_id = checkout(client, user_headers, cart).json()["order_id"]
    run(db.products.update_one({"_id": cart[1]["_id"]}, {"$set": {"quantity": 0}}))

    assert post_webhook(client, captured_event()).status_code == 200

    order = run(db.orders.find_one({"_id": ObjectId(order_id)}))
    assert order["payment_status"] == "completed"
    assert order["status_history"][-1]["note"] == "Insufficient stock for Silk Shirt"
    assert run(db.products.find_one({"_id": cart[0]["_id"]}))["quantity"] == 10
    assert run(db.products.find_one({"_id": cart[1]["_id"]}))["quantity"] == 0
