from datetime import datetime

import pytest

from app.core import cloudinary_client, razorpay_client
from conftest import SHIPPING_ADDRESS, run


@pytest.fixture
def deleted_images(monkeypatch):
    deleted = []

    async def fake_delete_image(public_id):
        deleted.append(public_id)
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary_client, "delete_image", fake_delete_image)
    return deleted


def product_payload(category, **overrides):
    payload = {
        "name": "Men's Linen Shirt",
        "description": "Breathable linen shirt",
        "price": 1299,
        "sku": "lin-001",
        "quantity": 20,
        "category": str(category["_id"]),
        "gst_rate": 12,
    }
    payload.update(overrides)
    return payload


def test_admin_routes_require_admin(client, user_headers):
    response = client.get("/api/admin/products", headers=user_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Not authorized as an admin"

    assert client.get("/api/admin/products").status_code == 401


def test_create_product(client, category, admin_headers):
    response = client.post("/api/admin/products", headers=admin_headers, json=product_payload(category))
    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "mens-linen-shirt"
    assert data["sku"] == "LIN-001"
    assert data["gst_rate"] == 12
    assert data["in_stock"] is True


def test_create_exempt_product(client, category, admin_headers):
    response = client.post(
        "/api/admin/products",
        headers=admin_headers,
        json=product_payload(category, gst_rate=0, gst_type="EXEMPT"),
    )
    assert response.status_code == 201
    assert response.json()["gst_rate"] == 0


@pytest.mark.parametrize("rate", [29, -5, 12.555])
def test_create_product_invalid_gst_rate(client, category, admin_headers, rate):
    response = client.post(
        "/api/admin/products",
        headers=admin_headers,
        json=product_payload(category, gst_rate=rate),
    )
    assert response.status_code == 422


def test_create_product_duplicate_sku(client, category, admin_headers):
    client.post("/api/admin/products", headers=admin_headers, json=product_payload(category))

    response = client.post(
        "/api/admin/products",
        headers=admin_headers,
        json=product_payload(category, name="Another Shirt", sku="LIN-001"),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "sku already exists. Please use a different value."


def test_create_product_unknown_category(client, admin_headers):
    response = client.post(
        "/api/admin/products",
        headers=admin_headers,
        json=product_payload({"_id": "507f1f77bcf86cd799439011"}),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Category does not exist"


def test_update_product_reslugs(client, make_product, admin_headers):
    product = make_product(name="Old Name", slug="old-name")

    response = client.put(
        f"/api/admin/products/{product['_id']}",
        headers=admin_headers,
        json={"name": "New Name", "price": 799},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["slug"] == "new-name"
    assert data["price"] == 799


def test_admin_product_list_includes_inactive(client, make_product, admin_headers):
    make_product(name="Live Shirt", sku="LIVE-1")
    make_product(name="Retired Shirt", sku="OLD-1", is_active=False)

    data = client.get("/api/admin/products", headers=admin_headers).json()
    assert data["pagination"]["total"] == 2

    data = client.get("/api/admin/products", headers=admin_headers, params={"search": "old-"}).json()
    assert [p["name"] for p in data["products"]] == ["Retired Shirt"]


def test_admin_search_treats_input_as_text(client, make_product, admin_headers):
    make_product(name="Kurta (Cotton)", sku="KC-1")
    make_product(name="Kurta Silk", sku="KS-1")

    response = client.get("/api/admin/products", headers=admin_headers, params={"search": "("})
    assert response.status_code == 200
    assert [p["name"] for p in response.json()["products"]] == ["Kurta (Cotton)"]

    response = client.get("/api/admin/products", headers=admin_headers, params={"search": "kurta.*"})
    assert response.json()["products"] == []

    for path in ["/api/admin/orders", "/api/admin/users"]:
        response = client.get(path, headers=admin_headers, params={"search": "[a-"})
        assert response.status_code == 200


def test_delete_product_removes_images(client, db, make_product, admin_headers, deleted_images):
    product = make_product(images=[
        {"url": "https://res.cloudinary.com/demo/image/upload/v1/clothing-store/products/a1.jpg", "is_main": True},
        {"url": "https://res.cloudinary.com/demo/image/upload/v1/other.jpg", "public_id": "clothing-store/products/b2"},
    ])

    response = client.delete(f"/api/admin/products/{product['_id']}", headers=admin_headers)
    assert response.status_code == 200
    assert deleted_images == ["clothing-store/products/a1", "clothing-store/products/b2"]
    assert run(db.products.count_documents({})) == 0


def test_category_lifecycle(client, db, admin_headers, deleted_images):
    parent = client.post("/api/admin/categories", headers=admin_headers, json={"name": "Men"}).json()
    assert parent["slug"] == "men"

    child = client.post("/api/admin/categories", headers=admin_headers, json={
        "name": "Kurtas",
        "parent_category": parent["id"],
        "image": "https://res.cloudinary.com/demo/image/upload/v1/clothing-store/categories/k.jpg",
        "image_public_id": "clothing-store/categories/k",
    }).json()

    categories = client.get("/api/admin/categories", headers=admin_headers).json()
    men = next(c for c in categories if c["id"] == parent["id"])
    assert men["subcategories"] == [child["id"]]

    response = client.put(f"/api/admin/categories/{child['id']}", headers=admin_headers, json={
        "image_public_id": "clothing-store/categories/k2",
    })
    assert response.status_code == 200
    assert deleted_images == ["clothing-store/categories/k"]

    response = client.delete(f"/api/admin/categories/{child['id']}", headers=admin_headers)
    assert response.status_code == 200
    categories = client.get("/api/admin/categories", headers=admin_headers).json()
    assert categories[0]["subcategories"] == []


def test_category_with_products_cannot_be_deleted(client, category, make_product, admin_headers):
    make_product()

    response = client.delete(f"/api/admin/categories/{category['_id']}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete category with existing products"


def test_duplicate_category_name(client, category, admin_headers):
    response = client.post("/api/admin/categories", headers=admin_headers, json={"name": "Shirts"})
    assert response.status_code == 400


def place_order(client, headers, product):
    return client.post("/api/orders/", headers=headers, json={
        "order_items": [{"product": str(product["_id"]), "quantity": 1}],
        "shipping_address": SHIPPING_ADDRESS,
        "payment_method": "razorpay",
    }).json()


def test_order_status_and_tracking(client, make_product, user_headers, admin_headers):
    order = place_order(client, user_headers, make_product())
    url = f"/api/admin/orders/{order['id']}"

    response = client.put(f"{url}/status", headers=admin_headers, json={"status": "processing"})
    assert response.json()["status"] == "processing"

    response = client.put(f"{url}/tracking", headers=admin_headers, json={"tracking_number": "DTDC123"})
    data = response.json()
    assert data["success"] is True
    assert data["order"]["status"] == "shipped"
    assert data["order"]["tracking_number"] == "DTDC123"
    assert data["order"]["status_history"][-1]["note"] == "Tracking number added: DTDC123"

    response = client.put(f"{url}/status", headers=admin_headers, json={"status": "delivered"})
    data = response.json()
    assert data["is_delivered"] is True
    assert data["delivered_at"] is not None


def test_order_status_rejects_unknown_value(client, make_product, user_headers, admin_headers):
    order = place_order(client, user_headers, make_product())
    response = client.put(
        f"/api/admin/orders/{order['id']}/status",
        headers=admin_headers,
        json={"status": "confirmed"},
    )
    assert response.status_code == 422


def test_admin_order_list_filters_by_status(client, make_product, user_headers, admin_headers):
    first = place_order(client, user_headers, make_product())
    place_order(client, user_headers, make_product())
    client.put(f"/api/admin/orders/{first['id']}/status", headers=admin_headers, json={"status": "cancelled"})

    data = client.get("/api/admin/orders", headers=admin_headers, params={"status": "cancelled"}).json()
    assert [o["id"] for o in data["orders"]] == [first["id"]]


def test_user_management(client, user, admin, admin_headers):
    data = client.get("/api/admin/users", headers=admin_headers).json()
    assert data["pagination"]["total"] == 2

    response = client.put(f"/api/admin/users/{user['_id']}/status", headers=admin_headers, json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "secret123"})
    assert response.status_code == 401


def test_admin_cannot_deactivate_self(client, admin, admin_headers):
    response = client.put(f"/api/admin/users/{admin['_id']}/status", headers=admin_headers, json={"is_active": False})
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot deactivate your own account"


def test_dashboard(client, make_product, user_headers, admin_headers):
    make_product(name="Nearly Gone", quantity=2, low_stock_threshold=5)
    place_order(client, user_headers, make_product(name="Popular"))

    response = client.get("/api/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["total_orders"] == 1
    assert "Nearly Gone" in [p["name"] for p in data["low_stock_products"]]
    assert len(data["recent_orders"]) == 1


@pytest.fixture
def paid_order(db, user):
    order = {
        "order_number": "ORD-20240101-ABCDEF12",
        "user": str(user["_id"]),
        "is_guest_order": False,
        "order_items": [{"product": "507f1f77bcf86cd799439011", "name": "Silk Shirt",
                         "price": 1000, "quantity": 1, "gst_rate": 18, "tax_amount": 180}],
        "shipping_address": SHIPPING_ADDRESS,
        "payment_method": "razorpay",
        "payment_status": "completed",
        "razorpay_order_id": "order_rzp_1",
        "razorpay_payment_id": "pay_1",
        "items_price": 1000,
        "tax_price": 180,
        "shipping_price": 0,
        "total_price": 1180,
        "is_paid": True,
        "status": "processing",
        "status_history": [],
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }
    order["_id"] = run(db.orders.insert_one(order)).inserted_id
    return order


@pytest.fixture
def refunds(monkeypatch):
    issued = []

    async def fake_create_refund(payment_id, amount, notes=None):
        issued.append({"payment_id": payment_id, "amount": amount, "notes": notes})
        return {"id": f"rfnd_{len(issued)}", "amount": int(amount * 100)}

    async def fake_fetch_refunds(payment_id):
        return {"count": 1, "items": [{"id": "rfnd_1", "amount": 50000, "status": "processed", "created_at": 1700000000}]}

    monkeypatch.setattr(razorpay_client, "create_refund", fake_create_refund)
    monkeypatch.setattr(razorpay_client, "fetch_refunds", fake_fetch_refunds)
    return issued


def test_partial_refund_keeps_order_status(client, paid_order, admin_headers, refunds):
    response = client.post(
        f"/api/admin/orders/{paid_order['_id']}/refund",
        headers=admin_headers,
        json={"amount": 500, "reason": "Damaged item"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "processing"
    assert data["payment_status"] == "completed"
    assert data["status_history"][-1]["note"] == "Refunded ₹500.00 (rfnd_1)"
    assert refunds[0]["payment_id"] == "pay_1"
    assert refunds[0]["notes"]["order_number"] == "ORD-20240101-ABCDEF12"


def test_full_refund_marks_order_refunded(client, paid_order, admin_headers, refunds):
    url = f"/api/admin/orders/{paid_order['_id']}/refund"
    response = client.post(url, headers=admin_headers, json={})
    data = response.json()
    assert data["status"] == "refunded"
    assert data["payment_status"] == "refunded"
    assert refunds[0]["amount"] == 1180

    again = client.post(url, headers=admin_headers, json={})
    assert again.status_code == 400
    assert again.json()["detail"] == "Order is already refunded"


def test_refund_cannot_exceed_total(client, paid_order, admin_headers, refunds):
    response = client.post(
        f"/api/admin/orders/{paid_order['_id']}/refund",
        headers=admin_headers,
        json={"amount": 2000},
    )
    assert response.status_code == 400
    assert refunds == []


def test_partial_refunds_add_up_to_the_total(client, db, paid_order, admin_headers, refunds):
    url = f"/api/admin/orders/{paid_order['_id']}/refund"

    first = client.post(url, headers=admin_headers, json={"amount": 590})
    assert first.json()["refunded_amount"] == 590
    assert first.json()["payment_status"] == "completed"

    over = client.post(url, headers=admin_headers, json={"amount": 1180})
    assert over.status_code == 400
    assert over.json()["detail"] == "Refund cannot exceed the remaining ₹590.00"

    second = client.post(url, headers=admin_headers, json={"amount": 590})
    data = second.json()
    assert data["refunded_amount"] == 1180
    assert data["status"] == "refunded"
    assert data["payment_status"] == "refunded"

    third = client.post(url, headers=admin_headers, json={"amount": 1})
    assert third.status_code == 400
    assert third.json()["detail"] == "Order is already refunded"
    assert [r["amount"] for r in refunds] == [590, 590]
    assert run(db.orders.find_one({"_id": paid_order["_id"]}))["refunded_amount"] == 1180


def test_refund_without_amount_takes_the_remainder(client, paid_order, admin_headers, refunds):
    url = f"/api/admin/orders/{paid_order['_id']}/refund"
    client.post(url, headers=admin_headers, json={"amount": 180})

    data = client.post(url, headers=admin_headers, json={}).json()
    assert refunds[1]["amount"] == 1000
    assert data["status"] == "refunded"


def test_refund_requires_captured_payment(client, make_product, user_headers, admin_headers, refunds):
    order = place_order(client, user_headers, make_product())
    response = client.post(f"/api/admin/orders/{order['id']}/refund", headers=admin_headers, json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "Order has no captured Razorpay payment"


def test_list_refunds(client, paid_order, admin_headers, refunds):
    response = client.get(f"/api/admin/orders/{paid_order['_id']}/refunds", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["refunds"] == [
        {"id": "rfnd_1", "amount": 500, "status": "processed", "created_at": 1700000000}
    ]
