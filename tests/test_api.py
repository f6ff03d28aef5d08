import uuid

import pytest

from services.catalog_service.models import Ad, Category, Product

INTERNAL_KEY = {"X-Internal-API-Key": "test-internal-key"}


async def _seed(components, *rows):
    async with components.database.session() as db:
        for row in rows:
            if isinstance(row, Product):
                await components.catalog.add_product(db, row)
            elif isinstance(row, Category):
                await components.catalog.add_category(db, row)
            else:
                await components.catalog.add_ad(db, row)


def seed(client, *rows):
    client.portal.call(_seed, client.app.state.components, *rows)


def product(price: float, category_id: str = "cat-1", name: str = "Falafel") -> Product:
    return Product(
        id=str(uuid.uuid4()),
        name=name,
        description="",
        price=price,
        image_url="",
        category_id=category_id,
    )


def login(client, name: str = "Alice", phone: str = "+15550001"):
    response = client.post("/users/register", json={"name": name, "phone": phone})
    assert response.status_code == 201
    assert client.post("/users/send-otp", json={"phone": phone}).status_code == 200
    response = client.post("/users/verify-otp", json={"phone": phone, "otp": "123456"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def headers(client):
    return login(client)


@pytest.fixture
def address_id(client, headers):
    response = client.post(
        "/delivery-addresses",
        json={"name": "Home", "addressLine": "12 Nile St"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["id"]


def place_order(client, headers, address_id, price=5.0, quantity=2):
    item = product(price)
    seed(client, item)
    return client.post(
        "/orders",
        json={"deliveryAddressId": address_id, "items": [{"productId": item.id, "quantity": quantity}]},
        headers=headers,
    )


class TestOrderFlow:

    def test_register_to_cancel(self, client, headers, address_id):
        response = place_order(client, headers, address_id)
        assert response.status_code == 201
        order = response.json()["order"]
        assert order["total"] == 10.0
        assert order["status"] == "pending"
        assert response.json()["items"][0]["price"] == 5.0

        response = client.post(f"/orders/{order['id']}/cancel", headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "canceled"

        response = client.post(f"/orders/{order['id']}/cancel", headers=headers)
        assert response.status_code == 400
        assert response.json() == {"detail": "Only pending orders can be canceled"}

    def test_reads(self, client, headers, address_id):
        order_id = place_order(client, headers, address_id).json()["order"]["id"]

        listing = client.get("/orders", headers=headers)
        assert listing.status_code == 200
        assert [o["id"] for o in listing.json()] == [order_id]

        detail = client.get(f"/orders/{order_id}", headers=headers)
        assert detail.status_code == 200
        assert detail.json()["order"]["deliveryAddressId"] == address_id
        assert len(detail.json()["items"]) == 1

    def test_other_customer_cannot_see_order(self, client, headers, address_id):
        order_id = place_order(client, headers, address_id).json()["order"]["id"]
        intruder = login(client, name="Bob", phone="+15550002")

        assert client.get(f"/orders/{order_id}", headers=intruder).status_code == 403
        assert client.post(f"/orders/{order_id}/cancel", headers=intruder).status_code == 403

    def test_unknown_product_is_unprocessable(self, client, headers, address_id):
        response = client.post(
            "/orders",
            json={"deliveryAddressId": address_id, "items": [{"productId": "nope", "quantity": 1}]},
            headers=headers,
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Invalid product ID nope: product not found"

    def test_orders_are_queued_for_notification(self, client, headers, address_id):
        place_order(client, headers, address_id)
        queue = client.app.state.components.queue
        assert len(queue.pending) == 1

    def test_missing_order_is_not_found(self, client, headers):
        assert client.get("/orders/does-not-exist", headers=headers).status_code == 404


class TestAuth:

    def test_protected_routes_require_token(self, client):
        for method, path in [("GET", "/orders"), ("GET", "/ads"), ("POST", "/delivery-addresses")]:
            response = client.request(method, path)
            assert response.status_code == 401
            assert response.json() == {"detail": "Authorization header is required"}

    def test_garbage_token_is_rejected(self, client):
        response = client.get("/orders", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json() == {"detail": "Could not validate credentials"}

    def test_duplicate_registration_conflicts(self, client):
        body = {"name": "Alice", "phone": "+15550009"}
        assert client.post("/users/register", json=body).status_code == 201
        assert client.post("/users/register", json=body).status_code == 409

    def test_registration_response_has_no_otp(self, client):
        response = client.post("/users/register", json={"name": "Alice", "phone": "+15550010"})
        assert set(response.json()) == {"id", "name", "phone"}

    def test_wrong_otp(self, client):
        client.post("/users/register", json={"name": "Alice", "phone": "+15550011"})
        client.post("/users/send-otp", json={"phone": "+15550011"})
        response = client.post("/users/verify-otp", json={"phone": "+15550011", "otp": "000000"})
        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid OTP"}

    def test_send_otp_to_unknown_phone(self, client):
        response = client.post("/users/send-otp", json={"phone": "+19999999"})
        assert response.status_code == 404


class TestValidation:

    def test_missing_fields(self, client):
        response = client.post("/users/register", json={"name": "Alice"})
        assert response.status_code == 400

    def test_malformed_json(self, client):
        response = client.post(
            "/users/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid request format"}

    def test_empty_body(self, client):
        response = client.post("/users/register")
        assert response.status_code == 400
        assert response.json() == {"detail": "Request body is required"}

    def test_zero_quantity(self, client, headers, address_id):
        response = place_order(client, headers, address_id, quantity=0)
        assert response.status_code == 400

    def test_empty_items(self, client, headers, address_id):
        response = client.post("/orders", json={"deliveryAddressId": address_id, "items": []}, headers=headers)
        assert response.status_code == 400


class TestCatalog:

    def test_lists(self, client, headers):
        seed(
            client,
            Category(id="cat-1", name="Mains", image_url="https://img/cat-1.png"),
            Ad(id="ad-1", image_url="https://img/ad-1.png", action="cat-1", action_type="category"),
            product(3.5, category_id="cat-1", name="Koshari"),
            product(2.0, category_id="cat-2", name="Tea"),
        )

        categories = client.get("/categories", headers=headers).json()
        assert categories == [{"id": "cat-1", "name": "Mains", "imageUrl": "https://img/cat-1.png"}]

        ads = client.get("/ads", headers=headers).json()
        assert ads[0]["actionType"] == "category"

        products = client.get("/products/cat-1", headers=headers).json()
        assert [p["name"] for p in products] == ["Koshari"]

    def test_empty_category(self, client, headers):
        response = client.get("/products/nothing-here", headers=headers)
        assert response.status_code == 200
        assert response.json() == []


class TestAddresses:

    def test_list_only_own(self, client, headers, address_id):
        other = login(client, name="Bob", phone="+15550003")
        client.post("/delivery-addresses", json={"name": "Work", "addressLine": "1 Elm"}, headers=other)

        response = client.get("/delivery-addresses", headers=headers)
        assert [a["id"] for a in response.json()] == [address_id]

    def test_foreign_address_is_forbidden(self, client, headers, address_id):
        other = login(client, name="Bob", phone="+15550004")
        response = place_order(client, other, address_id)
        assert response.status_code == 403


class TestInternalStatus:

    def test_operator_progresses_order(self, client, headers, address_id):
        order_id = place_order(client, headers, address_id).json()["order"]["id"]

        response = client.put(
            f"/internal/orders/{order_id}/status", json={"status": "confirmed"}, headers=INTERNAL_KEY
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        # Customer can no longer cancel
        assert client.post(f"/orders/{order_id}/cancel", headers=headers).status_code == 400

    def test_requires_api_key(self, client, headers, address_id):
        order_id = place_order(client, headers, address_id).json()["order"]["id"]

        missing = client.put(f"/internal/orders/{order_id}/status", json={"status": "confirmed"})
        wrong = client.put(
            f"/internal/orders/{order_id}/status",
            json={"status": "confirmed"},
            headers={"X-Internal-API-Key": "nope"},
        )
        bearer = client.put(f"/internal/orders/{order_id}/status", json={"status": "confirmed"}, headers=headers)
        assert missing.status_code == wrong.status_code == bearer.status_code == 403

    @pytest.mark.parametrize("status", ["canceled", "pending", "lost"])
    def test_rejects_non_fulfilment_statuses(self, client, headers, address_id, status):
        order_id = place_order(client, headers, address_id).json()["order"]["id"]
        response = client.put(
            f"/internal/orders/{order_id}/status", json={"status": status}, headers=INTERNAL_KEY
        )
        assert response.status_code == 400

    def test_unknown_order(self, client):
        response = client.put("/internal/orders/missing/status", json={"status": "delivered"}, headers=INTERNAL_KEY)
        assert response.status_code == 404


class TestPlumbing:

    def test_health(self, client):
        assert client.get("/health").json() == {"service": "delivery", "status": "running"}

    def test_unknown_path(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.json() == {"detail": "Not found"}

    def test_wrong_method_is_not_found(self, client):
        assert client.delete("/orders").status_code == 404

    def test_request_id_header(self, client):
        response = client.get("/ads", headers={"X-Request-ID": "abc"})
        assert response.headers["x-request-id"] == "abc"
