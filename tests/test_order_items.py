import pytest

from app.models.order import Order, OrderStatus
from app.models.order_item import ItemStatus
from tests.test_orders import create_order, set_item_statuses


@pytest.fixture
def order(client, headers, tables, dishes):
    return create_order(client, headers, tables, dishes)


def move(client, headers, item_id, status, role="chef"):
    return client.put(f"/order-items/{item_id}/status", json={"status": status}, headers=headers(role))


def order_status(client, headers, order_id):
    return client.get(f"/orders/{order_id}", headers=headers()).json()["status"]


def test_first_chef_to_start_preparing_is_kept(client, headers, order, users):
    item_id = order["items"][0]["id"]

    first = move(client, headers, item_id, "preparing")
    assert first.status_code == 200
    assert first.json()["chef_id"] == users["chef"].id

    move(client, headers, item_id, "ordered", role="admin")
    again = move(client, headers, item_id, "preparing", role="admin")
    assert again.json()["status"] == "preparing"
    assert again.json()["chef_id"] == users["chef"].id


def test_ready_stamps_prepared_at_and_rolls_order_up(client, headers, order):
    first, second = (i["id"] for i in order["items"])

    resp = move(client, headers, first, "ready")
    assert resp.json()["prepared_at"] is not None
    assert resp.json()["order"]["status"] == "open"

    move(client, headers, second, "preparing")
    assert order_status(client, headers, order["id"]) == "open"

    last = move(client, headers, second, "ready")
    assert last.json()["order"]["status"] == "ready"
    assert order_status(client, headers, order["id"]) == "ready"

    # repeating the last step is harmless
    again = move(client, headers, second, "ready")
    assert again.status_code == 200
    assert again.json()["order"]["status"] == "ready"


def test_roll_up_does_not_reopen_cancelled_orders(client, headers, order):
    client.put(f"/orders/{order['id']}/status", json={"status": "cancelled"}, headers=headers())

    for item in order["items"]:
        move(client, headers, item["id"], "ready")

    assert order_status(client, headers, order["id"]) == "cancelled"


def test_item_status_requires_chef_or_above(client, headers, order):
    item_id = order["items"][0]["id"]

    assert move(client, headers, item_id, "preparing", role="waiter").status_code == 403
    assert move(client, headers, item_id, "preparing", role="super_admin").status_code == 200
    assert move(client, headers, 999, "preparing").status_code == 404
    assert move(client, headers, item_id, "burnt").status_code == 400


def test_mark_served_requires_ready(client, headers, order, db):
    item_id = order["items"][0]["id"]

    resp = client.put(f"/order-items/{item_id}/served", headers=headers("waiter"))

    assert resp.status_code == 400
    assert resp.json()["message"] == "Only ready items can be marked as served"
    db.expire_all()
    assert db.get(Order, order["id"]).items[0].status == ItemStatus.ordered
    assert client.put("/order-items/999/served", headers=headers()).status_code == 404


def test_serving_last_ready_item_closes_order(client, headers, order):
    first, second = (i["id"] for i in order["items"])
    move(client, headers, first, "ready")
    move(client, headers, second, "ready")

    served = client.put(f"/order-items/{first}/served", headers=headers("waiter"))
    assert served.json()["status"] == "served"
    assert served.json()["order"]["status"] == "ready"

    client.put(f"/order-items/{second}/served", headers=headers("waiter"))
    body = client.get(f"/orders/{order['id']}", headers=headers()).json()
    assert body["status"] == "closed"
    assert body["closed_at"] is not None


def test_serving_ignores_items_still_in_the_kitchen(client, headers, order, db):
    # only ready siblings keep the order open when serving
    first, second = (i["id"] for i in order["items"])
    set_item_statuses(db, order["id"], ItemStatus.ready, ItemStatus.preparing)

    client.put(f"/order-items/{first}/served", headers=headers("waiter"))

    db.expire_all()
    stored = db.get(Order, order["id"])
    assert stored.status == OrderStatus.closed
    assert stored.items[1].status == ItemStatus.preparing


def test_kitchen_items_queue(client, headers, order):
    first, second = (i["id"] for i in order["items"])
    move(client, headers, first, "ready")

    resp = client.get("/order-items/kitchen", headers=headers("chef"))

    assert resp.status_code == 200
    assert [i["id"] for i in resp.json()] == [second]
    assert resp.json()[0]["order"]["table"]["name"] == "T1"
    assert resp.json()[0]["dish"]["name"] == "Steak"
    assert client.get("/order-items/kitchen", headers=headers("waiter")).status_code == 403
