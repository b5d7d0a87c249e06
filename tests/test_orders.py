from datetime import datetime, timezone
from decimal import Decimal

from app.models.order import Order
from app.models.order_item import OrderItem, ItemStatus


def order_payload(tables, dishes, *items):
    return {
        "table_id": tables["small"].id,
        "items": list(items) or [
            {"dish_id": dishes["soup"].id, "quantity": 2, "price": "5.50"},
            {"dish_id": dishes["steak"].id, "quantity": 1, "price": "19.90"},
        ],
    }


def create_order(client, headers, tables, dishes, *items):
    resp = client.post("/orders", json=order_payload(tables, dishes, *items), headers=headers("waiter"))
    assert resp.status_code == 200, resp.json()
    return resp.json()


def set_item_statuses(db, order_id, *statuses):
    db.expire_all()
    items = db.query(OrderItem).filter(OrderItem.order_id == order_id).order_by(OrderItem.id).all()
    for item, status in zip(items, statuses):
        item.status = status
    db.commit()


def test_create_order_snapshots_prices_and_total(client, headers, tables, dishes, users):
    body = create_order(
        client, headers, tables, dishes,
        {"dish_id": dishes["soup"].id, "quantity": 3, "price": "4.10", "notes": "no salt"},
        {"dish_id": dishes["steak"].id, "quantity": 1, "price": "0.20"},
    )

    assert body["status"] == "open"
    assert body["order_type"] == "dine_in"
    assert body["waiter_id"] == users["waiter"].id
    # caller-supplied prices are used as-is, even when they differ from the menu
    assert Decimal(body["total_amount"]) == Decimal("12.50")
    assert [Decimal(i["item_price"]) for i in body["items"]] == [Decimal("4.10"), Decimal("0.20")]
    assert [i["status"] for i in body["items"]] == ["ordered", "ordered"]
    assert body["items"][0]["notes"] == "no salt"
    assert body["items"][0]["dish"]["name"] == "Soup"
    assert body["closed_at"] is None


def test_create_order_validation(client, headers, tables, dishes, db):
    no_items = client.post("/orders", json={"table_id": tables["small"].id, "items": []}, headers=headers("waiter"))
    assert no_items.status_code == 400

    absent_items = client.post("/orders", json={"table_id": tables["small"].id}, headers=headers("waiter"))
    assert absent_items.status_code == 400

    payload = order_payload(tables, dishes)
    del payload["table_id"]
    assert client.post("/orders", json=payload, headers=headers("waiter")).status_code == 400

    payload["table_id"] = 999
    missing_table = client.post("/orders", json=payload, headers=headers("waiter"))
    assert missing_table.status_code == 404
    assert missing_table.json() == {"message": "Table not found"}

    bad_dish = order_payload(tables, dishes, {"dish_id": 999, "quantity": 1, "price": "1.00"})
    resp = client.post("/orders", json=bad_dish, headers=headers("waiter"))
    assert resp.status_code == 404
    assert resp.json()["dish_ids"] == [999]

    zero_qty = order_payload(tables, dishes, {"dish_id": dishes["soup"].id, "quantity": 0, "price": "1.00"})
    assert client.post("/orders", json=zero_qty, headers=headers("waiter")).status_code == 400

    assert db.query(Order).count() == 0


def test_create_order_requires_waiter_or_above(client, headers, tables, dishes):
    payload = order_payload(tables, dishes)

    assert client.post("/orders", json=payload, headers=headers("chef")).status_code == 403
    assert client.post("/orders", json=payload, headers=headers("trainee")).status_code == 403
    assert client.post("/orders", json=payload, headers=headers("admin")).status_code == 200


def test_update_replaces_items_and_recomputes_total(client, headers, tables, dishes, db):
    order = create_order(client, headers, tables, dishes)
    set_item_statuses(db, order["id"], ItemStatus.ready, ItemStatus.served)

    resp = client.put(
        f"/orders/{order['id']}",
        json={"items": [
            {"dish_id": dishes["steak"].id, "quantity": 3, "price": "0.10"},
            {"dish_id": dishes["soup"].id, "quantity": 7, "price": "0.30"},
        ]},
        headers=headers("waiter"),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert Decimal(body["total_amount"]) == Decimal("2.40")
    assert len(body["items"]) == 2
    assert [(i["dish_id"], i["quantity"], Decimal(i["item_price"])) for i in body["items"]] == [
        (dishes["steak"].id, 3, Decimal("0.10")),
        (dishes["soup"].id, 7, Decimal("0.30")),
    ]
    assert [i["status"] for i in body["items"]] == ["ordered", "ordered"]
    assert db.query(OrderItem).count() == 2


def test_update_without_items_only_patches_fields(client, headers, tables, dishes):
    order = create_order(client, headers, tables, dishes)

    resp = client.put(
        f"/orders/{order['id']}",
        json={"table_id": tables["large"].id, "order_type": "takeaway"},
        headers=headers("waiter"),
    )

    body = resp.json()
    assert body["table_id"] == tables["large"].id
    assert body["order_type"] == "takeaway"
    assert body["total_amount"] == order["total_amount"]
    assert [i["id"] for i in body["items"]] == [i["id"] for i in order["items"]]


def test_update_missing_order_or_empty_items(client, headers, tables, dishes):
    assert client.put("/orders/999", json={"order_type": "takeaway"}, headers=headers("waiter")).status_code == 404

    order = create_order(client, headers, tables, dishes)
    resp = client.put(f"/orders/{order['id']}", json={"items": []}, headers=headers("waiter"))
    assert resp.status_code == 400
    assert len(client.get(f"/orders/{order['id']}", headers=headers()).json()["items"]) == 2


def test_change_status_overwrites(client, headers, tables, dishes):
    order = create_order(client, headers, tables, dishes)

    resp = client.put(f"/orders/{order['id']}/status", json={"status": "in_progress"}, headers=headers("chef"))
    assert resp.status_code == 200
    assert resp.json()["status"] == "in_progress"

    # no transition table by default
    back = client.put(f"/orders/{order['id']}/status", json={"status": "open"}, headers=headers("chef"))
    assert back.json()["status"] == "open"

    assert client.put(f"/orders/{order['id']}/status", json={"status": "paid"}, headers=headers()).status_code == 400
    assert client.put("/orders/999/status", json={"status": "open"}, headers=headers()).status_code == 404


def test_close_example_scenario(client, headers, tables, dishes, db):
    order = create_order(client, headers, tables, dishes)
    set_item_statuses(db, order["id"], ItemStatus.ordered, ItemStatus.ready)

    refused = client.put(f"/orders/{order['id']}/close", json={"force": False}, headers=headers())
    assert refused.status_code == 400
    assert refused.json()["details"] == {"ordered": 1, "preparing": 0, "ready": 1, "served": 0}
    assert refused.json()["force_close_available"] is True

    forced = client.put(f"/orders/{order['id']}/close", json={"force": True}, headers=headers())
    assert forced.status_code == 200
    body = forced.json()
    assert body["message"] == "Order force-closed"
    assert body["order"]["status"] == "closed"
    assert body["order"]["closed_at"] is not None
    assert [i["status"] for i in body["order"]["items"]] == ["served", "served"]


def test_close_refuses_ready_but_unserved_items(client, headers, tables, dishes, db):
    order = create_order(client, headers, tables, dishes)
    set_item_statuses(db, order["id"], ItemStatus.served, ItemStatus.ready)

    resp = client.put(f"/orders/{order['id']}/close", headers=headers())

    assert resp.status_code == 400
    assert resp.json()["details"] == {"ready": 1, "served": 1}
    assert resp.json()["force_close_available"] is True
    assert client.get(f"/orders/{order['id']}", headers=headers()).json()["status"] == "open"


def test_close_when_everything_served(client, headers, tables, dishes, db):
    order = create_order(client, headers, tables, dishes)
    set_item_statuses(db, order["id"], ItemStatus.served, ItemStatus.served)

    resp = client.put(f"/orders/{order['id']}/close", json={}, headers=headers("waiter"))

    assert resp.status_code == 200
    assert resp.json()["message"] == "Order closed"
    assert resp.json()["order"]["status"] == "closed"


def test_can_close_is_advisory(client, headers, tables, dishes, db):
    order = create_order(client, headers, tables, dishes)
    set_item_statuses(db, order["id"], ItemStatus.preparing, ItemStatus.served)

    resp = client.get(f"/orders/{order['id']}/can-close", headers=headers())
    assert resp.json() == {
        "can_close": False,
        "unfinished_items": 1,
        "details": {"ordered": 0, "preparing": 1, "ready": 0, "served": 1},
    }

    set_item_statuses(db, order["id"], ItemStatus.served, ItemStatus.served)
    assert client.get(f"/orders/{order['id']}/can-close", headers=headers()).json()["can_close"] is True
    assert client.get("/orders/999/can-close", headers=headers()).status_code == 404


def test_kitchen_view_lists_only_pending_work(client, headers, tables, dishes, db):
    waiting = create_order(client, headers, tables, dishes)
    done = create_order(client, headers, tables, dishes)
    cancelled = create_order(client, headers, tables, dishes)
    set_item_statuses(db, waiting["id"], ItemStatus.ready, ItemStatus.preparing)
    set_item_statuses(db, done["id"], ItemStatus.ready, ItemStatus.ready)
    client.put(f"/orders/{cancelled['id']}/status", json={"status": "cancelled"}, headers=headers())

    body = client.get("/orders/kitchen", headers=headers("chef")).json()

    assert [o["id"] for o in body] == [waiting["id"]]
    assert [i["status"] for i in body[0]["items"]] == ["preparing"]


def test_list_orders_filters(client, headers, tables, dishes):
    first = create_order(client, headers, tables, dishes)
    second = create_order(client, headers, tables, dishes)
    client.put(f"/orders/{first['id']}/status", json={"status": "in_progress"}, headers=headers())

    everything = client.get("/orders", headers=headers()).json()
    assert [o["id"] for o in everything] == [second["id"], first["id"]]

    several = client.get("/orders", params={"status": "open,in_progress"}, headers=headers()).json()
    assert len(several) == 2
    only_open = client.get("/orders", params={"status": "open"}, headers=headers()).json()
    assert [o["id"] for o in only_open] == [second["id"]]

    today = datetime.now(timezone.utc).date().isoformat()
    assert len(client.get("/orders", params={"date": today}, headers=headers()).json()) == 2
    assert client.get("/orders", params={"date": "2001-01-01"}, headers=headers()).json() == []
    assert client.get("/orders", params={"status": "bogus"}, headers=headers()).status_code == 400


def test_get_order(client, headers, tables, dishes):
    order = create_order(client, headers, tables, dishes)

    body = client.get(f"/orders/{order['id']}", headers=headers("trainee")).json()

    assert body["table"]["name"] == "T1"
    assert body["waiter"]["role"] == "waiter"
    assert client.get("/orders/999", headers=headers()).json() == {"message": "Order not found"}
