"""
Purchase Order API Tests
End-to-end order lifecycle through the HTTP endpoints
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from unittest.mock import patch

from wholesale.core.exceptions import AllocationError

API = "/api/v1"


@pytest.fixture
def shirt(client: TestClient):
    response = client.post(f"{API}/products", json={
        "name": "Oxford Shirt",
        "code": "OX-001",
        "price": "10000",
        "inventory_options": [
            {"color": "Black", "size": "M", "stock_quantity": 10},
            {"color": "White", "size": "M", "physical_stock": 4, "allocated_stock": 0},
        ],
    })
    assert response.status_code == 201
    return response.json()


def order_payload(product, *lines, **extra):
    payload = {
        "company_name": "Acme Apparel",
        "items": [
            {
                "product_id": product["id"],
                "product_name": product["name"],
                "color": color,
                "size": size,
                "quantity": quantity,
                "unit_price": "10000",
            }
            for color, size, quantity in lines
        ],
    }
    payload.update(extra)
    return payload


def place(client, payload):
    response = client.post(f"{API}/orders/purchase", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def option_stock(client, product_id, color, size):
    product = client.get(f"{API}/products/{product_id}").json()
    for option in product["inventory_options"]:
        if option["color"] == color and option["size"] == size:
            return option["available_stock"]
    raise AssertionError(f"no option {color}/{size}")


class TestProductEndpoints:
    """Product catalog"""

    def test_create_and_get_product(self, client, shirt):
        response = client.get(f"{API}/products/{shirt['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["code"] == "OX-001"
        assert data["stock_quantity"] == 14
        assert len(data["inventory_options"]) == 2

    def test_duplicate_code_rejected(self, client, shirt):
        response = client.post(f"{API}/products", json={"name": "Copy", "code": "OX-001"})

        assert response.status_code == 400

    def test_duplicate_option_rejected(self, client):
        response = client.post(f"{API}/products", json={
            "name": "Tee",
            "code": "TEE-1",
            "inventory_options": [
                {"color": "Black", "size": "M", "stock_quantity": 1},
                {"color": "Black", "size": "M", "stock_quantity": 2},
            ],
        })

        assert response.status_code == 422

    def test_missing_product(self, client):
        assert client.get(f"{API}/products/9999").status_code == 404


class TestCreatePurchaseOrder:
    """Order submission allocates stock"""

    def test_create_allocates_in_submission_order(self, client, shirt):
        first = place(client, order_payload(shirt, ("Black", "M", 6)))
        second = place(client, order_payload(shirt, ("Black", "M", 8)))

        assert first["success"] is True
        assert first["order"]["status"] == "processing"
        assert first["order"]["allocation_status"] == "fully_allocated"
        assert first["order"]["items"][0]["allocated_quantity"] == 6
        assert first["order"]["order_number"].startswith("PO")

        assert second["order"]["items"][0]["allocated_quantity"] == 4
        assert second["order"]["allocation_status"] == "partially_allocated"
        assert second["allocation"]["remaining_stock"][0]["available"] == 0
        assert option_stock(client, shirt["id"], "Black", "M") == 0

    def test_unknown_option_stays_pending(self, client, shirt):
        data = place(client, order_payload(shirt, ("Pink", "XL", 2)))

        assert data["order"]["status"] == "pending"
        assert data["order"]["items"][0]["allocated_quantity"] == 0
        assert data["allocation"]["grants"][0]["shortfall"] == 2

    def test_colors_are_clamped_separately(self, client, shirt):
        data = place(client, order_payload(shirt, ("Black", "M", 3), ("White", "M", 5)))

        assert [item["allocated_quantity"] for item in data["order"]["items"]] == [3, 4]
        assert option_stock(client, shirt["id"], "Black", "M") == 7
        assert option_stock(client, shirt["id"], "White", "M") == 0

    def test_return_lines_do_not_consume_stock(self, client, shirt):
        data = place(client, order_payload(shirt, ("Black", "M", 2), ("Black", "M", -1)))

        assert [item["allocated_quantity"] for item in data["order"]["items"]] == [2, 0]
        assert data["order"]["allocation_status"] == "fully_allocated"

    def test_total_includes_floored_vat(self, client, shirt):
        payload = order_payload(shirt, ("Black", "M", 1))
        payload["items"][0]["unit_price"] = "9999"
        data = place(client, payload)

        assert Decimal(data["order"]["total_amount"]) == Decimal("10998")

    def test_empty_order_rejected(self, client):
        response = client.post(f"{API}/orders/purchase", json={"items": []})

        assert response.status_code == 400

    def test_unknown_product_rejected(self, client):
        response = client.post(f"{API}/orders/purchase", json={
            "items": [{"product_id": 424242, "color": "Black", "size": "M", "quantity": 1}]
        })

        assert response.status_code == 404


class TestReadPurchaseOrders:

    def test_list_newest_first_and_filter(self, client, shirt):
        first = place(client, order_payload(shirt, ("Black", "M", 4)))
        second = place(client, order_payload(shirt, ("Pink", "S", 1)))

        response = client.get(f"{API}/orders/purchase")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [o["id"] for o in data["orders"]] == [second["order"]["id"], first["order"]["id"]]

        pending = client.get(f"{API}/orders/purchase", params={"status": "pending"}).json()
        assert [o["id"] for o in pending["orders"]] == [second["order"]["id"]]

    def test_get_by_id(self, client, shirt):
        created = place(client, order_payload(shirt, ("Black", "M", 1)))

        response = client.get(f"{API}/orders/purchase/{created['order']['id']}")

        assert response.status_code == 200
        assert response.json()["order_number"] == created["order"]["order_number"]

    def test_get_missing(self, client):
        assert client.get(f"{API}/orders/purchase/777").status_code == 404


class TestEditPurchaseOrder:
    """Edits keep the original queue position"""

    def test_increase_quantity_takes_remaining_stock(self, client, shirt):
        created = place(client, order_payload(shirt, ("Black", "M", 3)))
        order_id = created["order"]["id"]
        assert option_stock(client, shirt["id"], "Black", "M") == 7

        response = client.put(
            f"{API}/orders/purchase/{order_id}",
            json=order_payload(shirt, ("Black", "M", 10)),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["items"][0]["allocated_quantity"] == 10
        assert data["order"]["created_at"] == created["order"]["created_at"]
        assert option_stock(client, shirt["id"], "Black", "M") == 0

    def test_older_order_edit_outranks_younger(self, client, shirt):
        older = place(client, order_payload(shirt, ("Black", "M", 2)))
        younger = place(client, order_payload(shirt, ("Black", "M", 8)))
        assert younger["order"]["items"][0]["allocated_quantity"] == 8

        client.put(
            f"{API}/orders/purchase/{older['order']['id']}",
            json=order_payload(shirt, ("Black", "M", 6)),
        )

        refreshed = client.get(f"{API}/orders/purchase/{younger['order']['id']}").json()
        assert refreshed["items"][0]["allocated_quantity"] == 4
        assert refreshed["allocation_status"] == "partially_allocated"

    def test_switching_color_frees_old_stock(self, client, shirt):
        created = place(client, order_payload(shirt, ("White", "M", 4)))
        waiting = place(client, order_payload(shirt, ("White", "M", 2)))
        assert waiting["order"]["status"] == "pending"

        client.put(
            f"{API}/orders/purchase/{created['order']['id']}",
            json=order_payload(shirt, ("Black", "M", 4)),
        )

        refreshed = client.get(f"{API}/orders/purchase/{waiting['order']['id']}").json()
        assert refreshed["items"][0]["allocated_quantity"] == 2
        assert option_stock(client, shirt["id"], "White", "M") == 2
        assert option_stock(client, shirt["id"], "Black", "M") == 6

    def test_edit_missing_order(self, client, shirt):
        response = client.put(f"{API}/orders/purchase/555", json=order_payload(shirt, ("Black", "M", 1)))

        assert response.status_code == 404


class TestCancelPurchaseOrder:

    def test_cancel_hands_stock_to_waiting_orders(self, client, shirt):
        first = place(client, order_payload(shirt, ("Black", "M", 10)))
        second = place(client, order_payload(shirt, ("Black", "M", 5)))
        assert second["order"]["status"] == "pending"

        response = client.post(f"{API}/orders/purchase/{first['order']['id']}/cancel")

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["status"] == "cancelled"
        assert data["order"]["items"][0]["allocated_quantity"] == 0

        refreshed = client.get(f"{API}/orders/purchase/{second['order']['id']}").json()
        assert refreshed["status"] == "processing"
        assert refreshed["items"][0]["allocated_quantity"] == 5
        assert option_stock(client, shirt["id"], "Black", "M") == 5

    def test_cancelled_order_cannot_be_edited(self, client, shirt):
        created = place(client, order_payload(shirt, ("Black", "M", 1)))
        order_id = created["order"]["id"]
        client.post(f"{API}/orders/purchase/{order_id}/cancel")

        response = client.put(f"{API}/orders/purchase/{order_id}", json=order_payload(shirt, ("Black", "M", 2)))
        assert response.status_code == 400

        again = client.post(f"{API}/orders/purchase/{order_id}/cancel")
        assert again.status_code == 400


class TestInboundAndShipment:

    def test_inbound_fills_waiting_order(self, client, shirt):
        place(client, order_payload(shirt, ("White", "M", 4)))
        waiting = place(client, order_payload(shirt, ("White", "M", 3)))

        response = client.post(f"{API}/inventory/inbound", json={
            "product_id": shirt["id"],
            "color": "White",
            "size": "M",
            "quantity": 5,
            "reason": "Supplier delivery",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["allocation"]["fully_allocated"] == 2

        refreshed = client.get(f"{API}/orders/purchase/{waiting['order']['id']}").json()
        assert refreshed["items"][0]["allocated_quantity"] == 3
        assert option_stock(client, shirt["id"], "White", "M") == 2

    def test_inbound_requires_reason(self, client, shirt):
        response = client.post(f"{API}/inventory/inbound", json={
            "product_id": shirt["id"], "color": "Black", "size": "M", "quantity": 1, "reason": "  ",
        })

        assert response.status_code == 400

    def test_inbound_unknown_option(self, client, shirt):
        response = client.post(f"{API}/inventory/inbound", json={
            "product_id": shirt["id"], "color": "Gold", "size": "M", "quantity": 1, "reason": "count",
        })

        assert response.status_code == 404

    def test_ship_allocated_stock(self, client, shirt):
        created = place(client, order_payload(shirt, ("White", "M", 3)))
        order_id = created["order"]["id"]

        response = client.post(f"{API}/orders/purchase/{order_id}/ship")

        assert response.status_code == 200
        order = response.json()["order"]
        assert order["status"] == "shipped"
        assert order["items"][0]["shipped_quantity"] == 3
        assert order["items"][0]["allocated_quantity"] == 0

        product = client.get(f"{API}/products/{shirt['id']}").json()
        white = [o for o in product["inventory_options"] if o["color"] == "White"][0]
        assert white["physical_stock"] == 1
        assert white["allocated_stock"] == 0
        assert white["available_stock"] == 1

    def test_ship_pending_order_rejected(self, client, shirt):
        created = place(client, order_payload(shirt, ("Pink", "M", 3)))

        response = client.post(f"{API}/orders/purchase/{created['order']['id']}/ship")

        assert response.status_code == 400


class TestAdminReallocation:

    def test_reset_and_reallocate(self, client, shirt):
        place(client, order_payload(shirt, ("Black", "M", 4), ("White", "M", 2)))
        place(client, order_payload(shirt, ("Black", "M", 9)))

        response = client.post(f"{API}/admin/allocation/reset-and-reallocate")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["allocation"]["total_orders"] == 2
        assert data["allocation"]["fully_allocated"] == 1
        assert data["allocation"]["partially_allocated"] == 1
        assert option_stock(client, shirt["id"], "Black", "M") == 0
        assert option_stock(client, shirt["id"], "White", "M") == 2


class TestSystemEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] in ("healthy", "degraded")

    def test_info(self, client):
        response = client.get("/info")

        assert response.status_code == 200
        assert response.json()["vat_rate"] == 0.1

    def test_failed_pass_returns_error_body(self, client, shirt):
        with patch(
            "wholesale.api.v1.admin.AllocationService.reset_and_reallocate",
            side_effect=AllocationError("Allocation pass failed: locked", [shirt["id"]]),
        ):
            response = client.post(f"{API}/admin/allocation/reset-and-reallocate")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["type"] == "allocation_error"
        assert body["product_ids"] == [shirt["id"]]


class TestProductWithoutOptions:
    """Products without color/size options sell from their product stock"""

    @pytest.fixture
    def scarf(self, client):
        response = client.post(f"{API}/products", json={
            "name": "Wool Scarf",
            "code": "SC-001",
            "stock_quantity": 10,
        })
        assert response.status_code == 201
        return response.json()

    def test_order_allocates_and_cancel_restores(self, client, scarf):
        data = place(client, order_payload(scarf, ("Ivory", "Free", 4)))

        assert data["order"]["status"] == "processing"
        assert data["order"]["items"][0]["allocated_quantity"] == 4
        assert client.get(f"{API}/products/{scarf['id']}").json()["stock_quantity"] == 6

        client.post(f"{API}/orders/purchase/{data['order']['id']}/cancel")

        assert client.get(f"{API}/products/{scarf['id']}").json()["stock_quantity"] == 10

    def test_partial_shipment_keeps_order_processing(self, client, scarf):
        first = place(client, order_payload(scarf, ("Ivory", "Free", 8)))
        second = place(client, order_payload(scarf, ("Ivory", "Free", 5)))
        assert second["order"]["items"][0]["allocated_quantity"] == 2

        shipped = client.post(f"{API}/orders/purchase/{second['order']['id']}/ship").json()

        assert shipped["order"]["status"] == "processing"
        assert shipped["order"]["items"][0]["shipped_quantity"] == 2
        assert first["order"]["status"] == "processing"
