from datetime import datetime, timedelta, timezone

from conftest import ADMIN_ID, OTHER_USER_ID, USER_ID, headers

ADDRESS_JSON = {
    "street": "Marszalkowska 1",
    "city": "Warszawa",
    "state": "Mazowieckie",
    "zipCode": "00-001",
    "country": "PL",
}
CHECKOUT = {"shippingAddress": ADDRESS_JSON, "billingAddress": ADDRESS_JSON, "paymentMethod": "card"}
ADMIN = headers(ADMIN_ID, "ADMIN")


def add_to_cart(client, product, quantity=1, user_id=USER_ID):
    return client.post(
        "/cart/items",
        json={"productId": product.id, "quantity": quantity},
        headers=headers(user_id),
    )


def test_health(client):
    res = client.get("/health")

    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_missing_user_header_is_unauthorized(client):
    res = client.get("/cart")

    assert res.status_code == 401
    assert res.json() == {"status": "fail", "message": "User not authenticated"}


def test_cart_flow(client, make_product):
    product = make_product(name="Mug", price="12.50", stock=5)

    res = add_to_cart(client, product, 2)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "success"
    item = body["data"]["items"][0]
    assert item["productId"] == product.id
    assert item["product"]["isActive"] is True
    assert float(body["data"]["total"]) == 25.0

    res = client.put(f"/cart/items/{item['id']}", json={"quantity": 3}, headers=headers())
    assert res.json()["data"]["items"][0]["quantity"] == 3

    res = client.delete(f"/cart/items/{item['id']}", headers=headers())
    assert res.json()["data"]["itemCount"] == 0

    res = client.delete("/cart", headers=headers())
    assert res.status_code == 200
    assert res.json()["message"] == "Cart cleared successfully"


def test_add_over_stock_returns_400(client, make_product):
    product = make_product(stock=5)

    res = add_to_cart(client, product, 6)

    assert res.status_code == 400
    assert res.json()["status"] == "fail"
    assert "Insufficient stock" in res.json()["message"]
    assert client.get("/cart", headers=headers()).json()["data"]["items"] == []


def test_request_validation_returns_400(client, make_product):
    product = make_product()

    res = add_to_cart(client, product, 0)
    assert res.status_code == 400
    assert res.json()["message"] == "Validation failed"
    assert res.json()["errors"][0]["field"] == "quantity"

    res = client.post("/cart/items", json={"productId": "not-a-uuid", "quantity": 1}, headers=headers())
    assert res.status_code == 400


def test_unknown_product_returns_404(client):
    res = client.post(
        "/cart/items",
        json={"productId": "00000000-0000-0000-0000-000000000000", "quantity": 1},
        headers=headers(),
    )

    assert res.status_code == 404


def test_checkout_and_order_access(client, make_product):
    product = make_product(price="10.00", stock=5)
    add_to_cart(client, product, 2)

    res = client.post("/orders", json=CHECKOUT, headers=headers())
    assert res.status_code == 201
    order = res.json()["data"]
    assert order["status"] == "PENDING"
    assert order["paymentStatus"] == "PENDING"
    assert float(order["total"]) == 20.0
    assert order["shippingAddress"]["zipCode"] == "00-001"

    assert client.get(f"/orders/{order['id']}", headers=headers()).status_code == 200
    assert client.get(f"/orders/number/{order['orderNumber']}", headers=headers()).status_code == 200
    assert client.get(f"/orders/{order['id']}", headers=ADMIN).status_code == 200

    res = client.get(f"/orders/{order['id']}", headers=headers(OTHER_USER_ID))
    assert res.status_code == 403

    listing = client.get("/orders", headers=headers(OTHER_USER_ID)).json()["data"]
    assert listing["orders"] == []
    assert listing["pagination"]["total"] == 0

    listing = client.get("/orders?page=1&limit=10", headers=ADMIN).json()["data"]
    assert listing["pagination"]["total"] == 1
    assert listing["orders"][0]["itemCount"] == 1


def test_checkout_with_empty_cart(client):
    res = client.post("/orders", json=CHECKOUT, headers=headers())

    assert res.status_code == 400
    assert res.json()["message"] == "Cart is empty"


def test_checkout_rejects_blank_address(client, make_product):
    add_to_cart(client, make_product())
    payload = dict(CHECKOUT, shippingAddress=dict(ADDRESS_JSON, city="   "))

    res = client.post("/orders", json=payload, headers=headers())

    assert res.status_code == 400


def test_order_number_pattern(client):
    assert client.get("/orders/number/NOT-A-NUMBER", headers=headers()).status_code == 400
    assert client.get("/orders/number/ORD-1-0001", headers=headers()).status_code == 404


def test_status_update_is_admin_only(client, make_product):
    add_to_cart(client, make_product())
    order = client.post("/orders", json=CHECKOUT, headers=headers()).json()["data"]
    url = f"/orders/{order['id']}/status"

    assert client.patch(url, json={"status": "CONFIRMED"}, headers=headers()).status_code == 403

    res = client.patch(url, json={"status": "CONFIRMED", "paymentStatus": "PAID"}, headers=ADMIN)
    assert res.status_code == 200
    assert res.json()["data"]["paymentStatus"] == "PAID"

    res = client.patch(url, json={"status": "DELIVERED"}, headers=ADMIN)
    assert res.status_code == 400
    assert res.json()["message"] == "Cannot change order status from CONFIRMED to DELIVERED"

    assert client.patch(url, json={"status": "LOST"}, headers=ADMIN).status_code == 400


def test_cancel_then_cancel_again(client, make_product):
    product = make_product(stock=3)
    add_to_cart(client, product, 3)
    order = client.post("/orders", json=CHECKOUT, headers=headers()).json()["data"]

    assert client.patch(f"/orders/{order['id']}/cancel", headers=headers(OTHER_USER_ID)).status_code == 403

    res = client.patch(f"/orders/{order['id']}/cancel", headers=headers())
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "CANCELLED"

    assert client.patch(f"/orders/{order['id']}/cancel", headers=headers()).status_code == 400


def test_quotation_lifecycle(client, make_product):
    product = make_product(price="10.00", stock=5)
    valid_until = (datetime.now(timezone.utc) + timedelta(days=7)).isoformat()

    res = client.post(
        "/quotations",
        json={"items": [{"productId": product.id, "quantity": 2}], "validUntil": valid_until},
        headers=headers(),
    )
    assert res.status_code == 201
    quotation = res.json()["data"]
    assert quotation["status"] == "PENDING"
    assert float(quotation["total"]) == 20.0

    url = f"/quotations/{quotation['id']}"
    assert client.patch(f"{url}/status", json={"status": "APPROVED"}, headers=headers()).status_code == 403
    assert client.patch(f"{url}/status", json={"status": "CONVERTED"}, headers=ADMIN).status_code == 400
    assert client.patch(f"{url}/status", json={"status": "APPROVED"}, headers=ADMIN).status_code == 200

    convert = {"shippingAddress": ADDRESS_JSON, "billingAddress": ADDRESS_JSON}
    res = client.post(f"{url}/convert-to-order", json=convert, headers=headers())
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["orderNumber"].startswith("ORD-")
    assert float(data["order"]["total"]) == 20.0

    res = client.post(f"{url}/convert-to-order", json=convert, headers=headers())
    assert res.status_code == 400

    stored = client.get(url, headers=headers()).json()["data"]
    assert stored["status"] == "CONVERTED"
    assert stored["orderId"] == data["orderId"]
    assert client.get(f"/quotations/number/{stored['quotationNumber']}", headers=headers()).status_code == 200
    assert client.get(url, headers=headers(OTHER_USER_ID)).status_code == 403


def test_quotation_validation(client, make_product):
    product = make_product()
    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    future = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()

    res = client.post(
        "/quotations",
        json={"items": [{"productId": product.id, "quantity": 1}], "validUntil": past},
        headers=headers(),
    )
    assert res.status_code == 400

    res = client.post("/quotations", json={"items": [], "validUntil": future}, headers=headers())
    assert res.status_code == 400


def test_delete_quotation(client, make_product):
    product = make_product()
    valid_until = (datetime.now(timezone.utc) + timedelta(days=7)).isoformat()
    quotation = client.post(
        "/quotations",
        json={"items": [{"productId": product.id, "quantity": 1}], "validUntil": valid_until},
        headers=headers(),
    ).json()["data"]

    res = client.delete(f"/quotations/{quotation['id']}", headers=headers())

    assert res.status_code == 200
    assert res.json() == {"status": "success", "message": "Quotation deleted successfully"}
    assert client.get(f"/quotations/{quotation['id']}", headers=headers()).status_code == 404
    assert client.get("/quotations", headers=headers()).json()["data"]["quotations"] == []
