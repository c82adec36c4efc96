import pytest
from httpx import AsyncClient

from helpers import (
    ADMIN,
    CUSTOMER,
    OTHER_CUSTOMER,
    OUTSIDE_VENDOR,
    SHIPPING,
    VENDOR_A,
    VENDOR_B,
    headers_for,
    stock_of,
)


async def place_order(client: AsyncClient, *items: dict, caller=CUSTOMER):
    return await client.post(
        "/orders",
        json={"items": list(items), **SHIPPING},
        headers=headers_for(caller)
    )


@pytest.mark.asyncio
async def test_create_order_success(client: AsyncClient, products, test_async_session_maker):
    response = await place_order(client, {"product_id": 1, "quantity": 2, "vendor_id": 9})

    assert response.status_code == 201
    data = response.json()

    assert data["customer_id"] == CUSTOMER.caller_id
    assert data["total_amount"] == 20.0
    assert data["status"] == "PENDING"
    assert data["order_number"].startswith("ORD-")
    assert data["shipping_country"] == "US"
    assert len(data["items"]) == 1
    assert data["items"][0]["line_total"] == 20.0
    assert "created_at" in data
    assert await stock_of(test_async_session_maker, 1) == 3


@pytest.mark.asyncio
async def test_create_order_out_of_stock(client: AsyncClient, products, test_async_session_maker):
    response = await place_order(
        client,
        {"product_id": 1, "quantity": 1},
        {"product_id": 3, "quantity": 1}
    )

    assert response.status_code == 409
    assert response.json() == {"detail": "Insufficient stock for Lamp", "type": "out_of_stock"}
    assert await stock_of(test_async_session_maker, 1) == 5


@pytest.mark.asyncio
async def test_create_order_unknown_product(client: AsyncClient, products):
    response = await place_order(client, {"product_id": 404, "quantity": 1})

    assert response.status_code == 404
    assert response.json()["type"] == "not_found"


@pytest.mark.asyncio
async def test_create_order_invalid_empty_items(client: AsyncClient, products):
    response = await place_order(client)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_order_invalid_zero_quantity(client: AsyncClient, products):
    response = await place_order(client, {"product_id": 1, "quantity": 0})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_order_missing_shipping_field(client: AsyncClient, products):
    payload = {"items": [{"product_id": 1, "quantity": 1}], **SHIPPING}
    del payload["shipping_zip"]

    response = await client.post("/orders", json=payload, headers=headers_for(CUSTOMER))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_order_as_vendor_is_forbidden(client: AsyncClient, products):
    response = await place_order(client, {"product_id": 1, "quantity": 1}, caller=VENDOR_A)

    assert response.status_code == 403
    assert response.json()["detail"] == "Only customers can create orders"


@pytest.mark.asyncio
async def test_missing_identity_is_unauthorized(client: AsyncClient, products):
    response = await client.post("/orders", json={"items": [{"product_id": 1, "quantity": 1}], **SHIPPING})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_role_is_unauthorized(client: AsyncClient):
    response = await client.get(
        "/orders/customer",
        headers={"X-User-Id": "1", "X-User-Role": "SUPERUSER"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_order_access(client: AsyncClient, products):
    created = (await place_order(client, {"product_id": 1, "quantity": 1})).json()

    for caller in (CUSTOMER, VENDOR_A):
        response = await client.get(f"/orders/{created['id']}", headers=headers_for(caller))
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    for caller in (OTHER_CUSTOMER, OUTSIDE_VENDOR):
        response = await client.get(f"/orders/{created['id']}", headers=headers_for(caller))
        assert response.status_code == 403
        assert response.json()["detail"] == "You do not have access to this order"


@pytest.mark.asyncio
async def test_get_order_not_found(client: AsyncClient):
    response = await client.get("/orders/987", headers=headers_for(OTHER_CUSTOMER))

    assert response.status_code == 404
    assert response.json()["detail"] == "Order not found"


@pytest.mark.asyncio
async def test_customer_and_vendor_listings(client: AsyncClient, products):
    first = (await place_order(client, {"product_id": 1, "quantity": 1})).json()
    second = (await place_order(client, {"product_id": 1, "quantity": 1}, {"product_id": 2, "quantity": 1})).json()

    customer_orders = await client.get("/orders/customer", headers=headers_for(CUSTOMER))
    assert customer_orders.status_code == 200
    assert [o["id"] for o in customer_orders.json()] == [second["id"], first["id"]]

    vendor_orders = await client.get("/orders/vendor", headers=headers_for(VENDOR_B))
    assert vendor_orders.status_code == 200
    body = vendor_orders.json()
    assert [o["id"] for o in body] == [second["id"]]
    assert [item["vendor_id"] for item in body[0]["items"]] == [VENDOR_B.caller_id]

    wrong_role = await client.get("/orders/vendor", headers=headers_for(CUSTOMER))
    assert wrong_role.status_code == 403


@pytest.mark.asyncio
async def test_vendor_updates_status(client: AsyncClient, products):
    created = (await place_order(client, {"product_id": 1, "quantity": 1}, {"product_id": 2, "quantity": 1})).json()

    response = await client.put(
        f"/orders/{created['id']}/status",
        json={"status": "CONFIRMED"},
        headers=headers_for(VENDOR_A)
    )

    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"
    assert len(response.json()["items"]) == 2


@pytest.mark.asyncio
async def test_update_status_accepts_lowercase(client: AsyncClient, products):
    created = (await place_order(client, {"product_id": 1, "quantity": 1})).json()

    response = await client.put(
        f"/orders/{created['id']}/status",
        json={"status": "confirmed"},
        headers=headers_for(VENDOR_A)
    )

    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"


@pytest.mark.asyncio
async def test_update_status_forbidden_and_invalid(client: AsyncClient, products):
    created = (await place_order(client, {"product_id": 1, "quantity": 1})).json()

    forbidden = await client.put(
        f"/orders/{created['id']}/status",
        json={"status": "SHIPPED"},
        headers=headers_for(VENDOR_B)
    )
    assert forbidden.status_code == 403

    invalid = await client.put(
        f"/orders/{created['id']}/status",
        json={"status": "TELEPORTED"},
        headers=headers_for(VENDOR_A)
    )
    assert invalid.status_code == 422


@pytest.mark.asyncio
async def test_admin_endpoints(client: AsyncClient, products):
    created = (await place_order(client, {"product_id": 2, "quantity": 1})).json()

    listing = await client.get("/admin/orders", headers=headers_for(ADMIN))
    assert listing.status_code == 200
    assert [o["id"] for o in listing.json()] == [created["id"]]

    override = await client.put(
        f"/admin/orders/{created['id']}/status",
        json={"status": "CANCELLED"},
        headers=headers_for(ADMIN)
    )
    assert override.status_code == 200
    assert override.json()["status"] == "CANCELLED"

    not_admin = await client.get("/admin/orders", headers=headers_for(VENDOR_B))
    assert not_admin.status_code == 403


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "healthy"
    assert data["checks"]["database"] == "healthy"
