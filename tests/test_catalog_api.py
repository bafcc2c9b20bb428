import pytest


@pytest.mark.asyncio
async def test_person_crud(client):
    response = await client.post(
        "/api/persons",
        json={"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com", "phone": "+44 20 0000"},
    )
    assert response.status_code == 201
    person = response.json()
    assert person["id"] is not None
    assert person["updated_at"] is None

    response = await client.get(f"/api/persons/{person['id']}")
    assert response.status_code == 200
    assert response.json()["email"] == "ada@example.com"

    # Partial update keeps the other fields
    response = await client.put(f"/api/persons/{person['id']}", json={"address": "12 St James's Square"})
    assert response.status_code == 200
    updated = response.json()
    assert updated["address"] == "12 St James's Square"
    assert updated["first_name"] == "Ada"
    assert updated["phone"] == "+44 20 0000"
    assert updated["updated_at"] is not None

    response = await client.get("/api/persons")
    assert [p["id"] for p in response.json()] == [person["id"]]

    assert (await client.delete(f"/api/persons/{person['id']}")).status_code == 204
    assert (await client.get(f"/api/persons/{person['id']}")).status_code == 404
    assert (await client.delete(f"/api/persons/{person['id']}")).status_code == 404
    assert (await client.put(f"/api/persons/{person['id']}", json={"phone": "1"})).status_code == 404


@pytest.mark.asyncio
async def test_person_with_invalid_email_is_rejected(client):
    response = await client.post(
        "/api/persons",
        json={"first_name": "No", "last_name": "Mail", "email": "not-an-email"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_deleting_person_removes_their_orders(client, catalog):
    payload = {"person_id": catalog.person_id, "details": [{"item_id": catalog.pen_id, "quantity": 2}]}
    order = (await client.post("/api/orders", json=payload)).json()

    assert (await client.delete(f"/api/persons/{catalog.person_id}")).status_code == 204

    assert (await client.get(f"/api/orders/{order['id']}")).status_code == 404
    assert (await client.get(f"/api/orders/details/{order['details'][0]['id']}")).status_code == 404
    # Catalog items stay
    assert (await client.get(f"/api/items/{catalog.pen_id}")).status_code == 200


@pytest.mark.asyncio
async def test_item_crud(client):
    response = await client.post(
        "/api/items",
        json={"name": "Stapler", "price": "12.50", "description": "Heavy duty", "stock": 3},
    )
    assert response.status_code == 201
    item = response.json()
    assert item["price"] == "12.50"

    response = await client.put(
        f"/api/items/{item['id']}",
        json={"id": item["id"], "name": "Stapler XL", "price": "14.00", "stock": 5},
    )
    assert response.status_code == 204

    current = (await client.get(f"/api/items/{item['id']}")).json()
    assert current["name"] == "Stapler XL"
    assert current["price"] == "14.00"
    assert current["description"] is None
    assert current["stock"] == 5

    assert (await client.delete(f"/api/items/{item['id']}")).status_code == 204
    assert (await client.get(f"/api/items/{item['id']}")).status_code == 404
    assert (await client.delete(f"/api/items/{item['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_item_update_id_mismatch_and_missing(client, catalog):
    body = {"id": catalog.pen_id, "name": "Pen", "price": "1.75", "stock": 100}

    response = await client.put(f"/api/items/{catalog.notebook_id}", json=body)
    assert response.status_code == 400

    response = await client.put("/api/items/999", json={**body, "id": 999})
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("price", ["0", "-1.00", "1.234"])
async def test_item_with_invalid_price_is_rejected(client, price):
    response = await client.post("/api/items", json={"name": "Broken", "price": price})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_item_referenced_by_order_cannot_be_deleted(client, catalog):
    payload = {"person_id": catalog.person_id, "details": [{"item_id": catalog.notebook_id, "quantity": 1}]}
    assert (await client.post("/api/orders", json=payload)).status_code == 201

    response = await client.delete(f"/api/items/{catalog.notebook_id}")
    assert response.status_code == 409
    assert "order detail" in response.json()["detail"]

    # Unreferenced items can still go
    assert (await client.delete(f"/api/items/{catalog.pen_id}")).status_code == 204


@pytest.mark.asyncio
async def test_item_price_change_keeps_order_totals(client, catalog):
    payload = {"person_id": catalog.person_id, "details": [{"item_id": catalog.notebook_id, "quantity": 2}]}
    order = (await client.post("/api/orders", json=payload)).json()

    body = {"id": catalog.notebook_id, "name": "Notebook", "price": "12.00", "stock": 10}
    assert (await client.put(f"/api/items/{catalog.notebook_id}", json=body)).status_code == 204

    current = (await client.get(f"/api/orders/{order['id']}")).json()
    assert current["total"] == "19.98"
    assert current["details"][0]["unit_price"] == "9.99"


@pytest.mark.asyncio
async def test_root_and_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"

    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] in ("ok", "degraded")
