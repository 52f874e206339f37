from app.models import Order, Product


def make_product(**overrides):
    data = {
        "name": "Linen Shirt",
        "slug": "linen-shirt",
        "description": "Shirt",
        "price": 1299,
        "sku": "LIN-001",
        "category": "507f1f77bcf86cd799439011",
        "quantity": 5,
        "low_stock_threshold": 5,
    }
    data.update(overrides)
    return Product(**data)


def test_product_stock_flags():
    product = make_product()
    assert product.in_stock
    assert product.is_low_stock

    assert not make_product(quantity=0).in_stock
    assert not make_product(quantity=50).is_low_stock


def test_untracked_product_is_always_in_stock():
    product = make_product(quantity=0, track_quantity=False)
    assert product.in_stock
    assert not product.is_low_stock


def test_product_defaults():
    product = make_product()
    assert product.gst_rate == 18
    assert product.gst_inclusive is False
    assert product.gst_type == "CGST_SGST"


def test_order_total_items():
    order = Order(
        order_number="ORD-1",
        order_items=[
            {"product": "a", "name": "A", "price": 100, "quantity": 2},
            {"product": "b", "name": "B", "price": 50, "quantity": 3},
        ],
        shipping_address={
            "full_name": "Asha Verma",
            "address": "221 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "zip_code": "560001",
            "phone": "+919876543210",
        },
        payment_method="razorpay",
        items_price=350,
        total_price=350,
    )
    assert order.total_items == 5
    assert order.status == "pending"
    assert order.payment_status == "pending"
    assert order.shipping_address.country == "India"
