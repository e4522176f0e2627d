from decimal import Decimal

import pytest

from vehicle_store import repository
from vehicle_store.context import Principal
from vehicle_store.errors import InsufficientStockError, ValidationError
from vehicle_store.models import Order, OrderItem, Role, User
from vehicle_store.orders import OrderService, validate_order_request
from vehicle_store.schemas import CreateOrderRequest, OrderItemRequest


def place(client, headers, items, address="1 Main St, Springfield"):
    return client.post("/orders", json={"shippingAddress": address, "items": items}, headers=headers)


def test_order_decrements_stock_and_totals(client, auth_headers, make_vehicle, db):
    vehicle = make_vehicle(price=Decimal("100"), quantity_available=5)
    resp = place(client, auth_headers(), [{"vehicleId": vehicle.id, "quantity": 3}])
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert Decimal(str(body["totalAmount"])) == Decimal("300")
    assert body["status"] == "PENDING"
    assert body["userEmail"] == "alice@example.com"
    assert body["shippingAddress"] == "1 Main St, Springfield"
    assert body["createdAt"]
    [item] = body["items"]
    assert item["vehicleId"] == vehicle.id
    assert item["vehicleName"] == "Test Car"
    assert item["quantity"] == 3
    assert Decimal(str(item["pricePerUnit"])) == Decimal("100")
    assert Decimal(str(item["totalPrice"])) == Decimal("300")

    db.refresh(vehicle)
    assert vehicle.quantity_available == 2


def test_total_is_sum_of_line_items(client, auth_headers, make_vehicle, db):
    car = make_vehicle(name="Car", price=Decimal("19999.99"), quantity_available=4)
    truck = make_vehicle(name="Truck", price=Decimal("45000.50"), quantity_available=2)
    resp = place(client, auth_headers(), [{"vehicleId": car.id, "quantity": 3}, {"vehicleId": truck.id, "quantity": 2}])
    assert resp.status_code == 200
    body = resp.json()
    line_totals = [Decimal(str(i["pricePerUnit"])) * i["quantity"] for i in body["items"]]
    assert Decimal(str(body["totalAmount"])) == sum(line_totals) == Decimal("150000.97")

    order = db.query(Order).one()
    items = db.query(OrderItem).filter(OrderItem.order_id == order.id).all()
    assert order.total_amount == sum(i.total_price for i in items)


def test_insufficient_stock_leaves_vehicle_untouched(client, auth_headers, make_vehicle, db):
    vehicle = make_vehicle(quantity_available=5)
    resp = place(client, auth_headers(), [{"vehicleId": vehicle.id, "quantity": 6}])
    assert resp.status_code == 400
    assert resp.json() == {"error": "Not enough vehicles available. Available: 5, Requested: 6"}
    db.refresh(vehicle)
    assert vehicle.quantity_available == 5
    assert db.query(Order).count() == 0


def test_repeated_vehicle_exceeding_stock_rolls_back_everything(client, auth_headers, make_vehicle, db):
    vehicle = make_vehicle(quantity_available=5)
    resp = place(client, auth_headers(), [{"vehicleId": vehicle.id, "quantity": 3}, {"vehicleId": vehicle.id, "quantity": 3}])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Not enough vehicles available. Available: 2, Requested: 3"
    db.refresh(vehicle)
    assert vehicle.quantity_available == 5
    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0


def test_repeated_vehicle_within_stock_sees_updated_quantity(client, auth_headers, make_vehicle, db):
    vehicle = make_vehicle(price=Decimal("100"), quantity_available=5)
    resp = place(client, auth_headers(), [{"vehicleId": vehicle.id, "quantity": 2}, {"vehicleId": vehicle.id, "quantity": 3}])
    assert resp.status_code == 200
    assert Decimal(str(resp.json()["totalAmount"])) == Decimal("500")
    db.refresh(vehicle)
    assert vehicle.quantity_available == 0


def test_missing_vehicle_rolls_back_earlier_items(client, auth_headers, make_vehicle, db):
    vehicle = make_vehicle(quantity_available=5)
    resp = place(client, auth_headers(), [{"vehicleId": vehicle.id, "quantity": 2}, {"vehicleId": 999, "quantity": 1}])
    assert resp.status_code == 404
    assert resp.json() == {"error": "Vehicle not found with id: 999"}
    db.refresh(vehicle)
    assert vehicle.quantity_available == 5
    assert db.query(Order).count() == 0


def test_price_is_snapshotted(client, auth_headers, make_vehicle, db):
    headers = auth_headers()
    vehicle = make_vehicle(price=Decimal("100"), quantity_available=5)
    assert place(client, headers, [{"vehicleId": vehicle.id, "quantity": 1}]).status_code == 200

    vehicle.price = Decimal("250")
    db.commit()

    order = client.get("/orders", headers=headers).json()["content"][0]
    assert Decimal(str(order["items"][0]["pricePerUnit"])) == Decimal("100")
    assert Decimal(str(order["totalAmount"])) == Decimal("100")


@pytest.mark.parametrize(
    "payload",
    [
        {"shippingAddress": "   ", "items": [{"vehicleId": 1, "quantity": 1}]},
        {"shippingAddress": "1 Main St", "items": []},
        {"shippingAddress": "1 Main St", "items": [{"vehicleId": 1, "quantity": 0}]},
        {"items": [{"vehicleId": 1, "quantity": 1}]},
    ],
)
def test_malformed_requests_are_rejected(client, auth_headers, make_vehicle, db, payload):
    vehicle = make_vehicle(quantity_available=5)
    resp = client.post("/orders", json=payload, headers=auth_headers())
    assert resp.status_code == 400
    assert "error" in resp.json()
    db.refresh(vehicle)
    assert vehicle.quantity_available == 5
    assert db.query(Order).count() == 0


def test_list_orders_only_returns_callers_orders_newest_first(client, auth_headers, make_vehicle):
    vehicle = make_vehicle(quantity_available=20)
    alice = auth_headers("alice@example.com")
    bob = auth_headers("bob@example.com")
    alice_ids = [place(client, alice, [{"vehicleId": vehicle.id, "quantity": 1}]).json()["id"] for _ in range(3)]
    place(client, bob, [{"vehicleId": vehicle.id, "quantity": 2}])

    resp = client.get("/orders", headers=alice)
    assert resp.status_code == 200
    body = resp.json()
    assert body["totalElements"] == 3
    assert [o["id"] for o in body["content"]] == list(reversed(alice_ids))
    assert {o["userEmail"] for o in body["content"]} == {"alice@example.com"}
    assert body["content"][0]["items"][0]["vehicleName"] == "Test Car"

    bob_orders = client.get("/orders", headers=bob).json()
    assert bob_orders["totalElements"] == 1


def test_list_orders_pagination(client, auth_headers, make_vehicle):
    vehicle = make_vehicle(quantity_available=20)
    headers = auth_headers()
    ids = [place(client, headers, [{"vehicleId": vehicle.id, "quantity": 1}]).json()["id"] for _ in range(5)]

    body = client.get("/orders", params={"page": 1, "size": 2}, headers=headers).json()
    assert body["totalElements"] == 5
    assert body["totalPages"] == 3
    assert [o["id"] for o in body["content"]] == [ids[2], ids[1]]

    body = client.get("/orders", params={"page": 3, "size": 2}, headers=headers).json()
    assert body["content"] == []

    body = client.get("/orders", params={"sortBy": "createdAt", "sortDir": "asc", "size": 2}, headers=headers).json()
    assert [o["id"] for o in body["content"]] == ids[:2]


def test_list_orders_rejects_unknown_sort_field(client, auth_headers):
    resp = client.get("/orders", params={"sortBy": "userId"}, headers=auth_headers())
    assert resp.status_code == 400


def test_list_orders_requires_authentication(client):
    resp = client.get("/orders")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Authentication required"}


# Service-level behaviour

@pytest.fixture
def principal(db):
    user = User(email="carol@example.com", password_hash="x", first_name="Carol", last_name="King", role=Role.USER)
    db.add(user)
    db.commit()
    return Principal.from_user(user)


def test_service_validates_request_shape():
    request = CreateOrderRequest.model_construct(shipping_address=" ", items=[])
    with pytest.raises(ValidationError):
        validate_order_request(request)
    request = CreateOrderRequest.model_construct(
        shipping_address="1 Main St",
        items=[OrderItemRequest.model_construct(vehicle_id=1, quantity=0)],
    )
    with pytest.raises(ValidationError):
        validate_order_request(request)


def test_lost_stock_race_rolls_back(db, make_vehicle, principal, monkeypatch):
    first = make_vehicle(name="First", quantity_available=5)
    second = make_vehicle(name="Second", quantity_available=5)
    real_decrement = repository.decrement_stock

    def racing_decrement(session, vehicle_id, quantity):
        if vehicle_id == second.id:
            # someone else bought the stock after our read
            return False
        return real_decrement(session, vehicle_id, quantity)

    monkeypatch.setattr(repository, "decrement_stock", racing_decrement)
    request = CreateOrderRequest(
        shipping_address="1 Main St",
        items=[OrderItemRequest(vehicle_id=first.id, quantity=2), OrderItemRequest(vehicle_id=second.id, quantity=1)],
    )
    with pytest.raises(InsufficientStockError):
        OrderService().create_order(db, principal, request)

    db.refresh(first)
    assert first.quantity_available == 5
    assert db.query(Order).count() == 0


def test_created_at_is_the_same_utc_value_on_create_and_list(client, auth_headers, make_vehicle):
    headers = auth_headers()
    vehicle = make_vehicle()
    created = place(client, headers, [{"vehicleId": vehicle.id, "quantity": 1}]).json()
    listed = client.get("/orders", headers=headers).json()["content"][0]
    assert listed["id"] == created["id"]
    assert listed["createdAt"] == created["createdAt"]
    assert created["createdAt"].endswith("Z")


def test_money_fields_are_json_numbers(client, auth_headers, make_vehicle):
    headers = auth_headers()
    vehicle = make_vehicle(price=Decimal("100.00"), quantity_available=5)
    body = place(client, headers, [{"vehicleId": vehicle.id, "quantity": 3}]).json()
    assert body["totalAmount"] == 300
    assert isinstance(body["totalAmount"], (int, float))
    assert isinstance(body["items"][0]["pricePerUnit"], (int, float))
    assert isinstance(body["items"][0]["totalPrice"], (int, float))

    listed = client.get("/orders", headers=headers).json()["content"][0]
    assert isinstance(listed["totalAmount"], (int, float))
