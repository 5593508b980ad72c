"""
Integration tests for the REST API endpoints.

Runs the real routes and repositories against in-memory SQLite.  Routing
goes through the ``route_provider`` stub (failing unless a test sets
``miles``), and ``/distance`` gets a Distance Matrix client backed by
``httpx.MockTransport``.
"""

from __future__ import annotations

import httpx
import pytest

from src.api.dependencies import get_distance_client
from src.infrastructure.distance_matrix import GoogleDistanceMatrixClient
from tests.conftest import CAMPUS_USER

LOCATION = {"lat": CAMPUS_USER.lat, "lng": CAMPUS_USER.lng}


def _use_routed(provider, miles: float) -> None:
    provider.error = None
    provider.miles = miles


async def _place_order(client, customer_id, servery="Baker", items=None, **extra):
    body = {
        "customer_id": customer_id,
        "servery": servery,
        "items": items if items is not None else [{"id": "fries", "quantity": 2}],
        "location": LOCATION,
        **extra,
    }
    return await client.post("/api/v1/orders", json=body)


# ── Health ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ── Quotes ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_quote_uses_routed_distance(client, route_provider):
    _use_routed(route_provider, 0.5)
    resp = await client.post(
        "/api/v1/quotes", json={"servery": "Baker", "location": LOCATION}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["state"] == "RESOLVED"
    assert data["provenance"] == "routed"
    assert data["miles"] == 0.5
    assert data["delivery_price"] == 4.10
    assert data["payable"] is True
    assert data["message"] is None


@pytest.mark.asyncio
async def test_quote_falls_back_to_great_circle(client):
    resp = await client.post(
        "/api/v1/quotes", json={"servery": "Baker", "location": LOCATION}
    )
    data = resp.json()
    assert data["provenance"] == "great-circle-fallback"
    assert data["miles"] == pytest.approx(0.168, abs=0.01)
    assert data["delivery_price"] == 3.00


@pytest.mark.asyncio
async def test_quote_without_location_is_not_payable(client, route_provider):
    resp = await client.post("/api/v1/quotes", json={"servery": "North"})
    data = resp.json()
    assert data["state"] == "IDLE"
    assert data["delivery_price"] is None
    assert data["payable"] is False
    assert data["message"] == "Enable location sharing and select a valid pickup point"
    assert route_provider.calls == []


@pytest.mark.asyncio
async def test_quote_rejects_unknown_servery(client):
    resp = await client.post(
        "/api/v1/quotes", json={"servery": "Sid Rich", "location": LOCATION}
    )
    assert resp.status_code == 422


# ── Distance proxy ────────────────────────────────────────────────────


def _distance_client(app, handler, api_key="test-key"):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    matrix = GoogleDistanceMatrixClient(api_key, http=http)
    app.dependency_overrides[get_distance_client] = lambda: matrix


@pytest.mark.asyncio
async def test_distance_proxy(app, client):
    payload = {
        "origin_addresses": ["Baker College Servery"],
        "destination_addresses": ["Lovett College"],
        "rows": [{"elements": [{
            "status": "OK",
            "distance": {"value": 1609, "text": "1.0 mi"},
            "duration": {"value": 1200, "text": "20 mins"},
        }]}],
    }
    _distance_client(app, lambda r: httpx.Response(200, json=payload))

    resp = await client.post(
        "/api/v1/distance",
        json={"origin": "Baker College Servery", "destination": LOCATION},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["distance"]["meters"] == 1609
    assert data["distance"]["miles"] == pytest.approx(0.99978, abs=1e-4)
    assert data["duration"]["minutes"] == 20
    assert data["origin"] == "Baker College Servery"
    assert data["mode"] == "walking"


@pytest.mark.asyncio
async def test_distance_without_api_key(app, client):
    _distance_client(app, lambda r: httpx.Response(200, json={}), api_key=None)
    resp = await client.post(
        "/api/v1/distance", json={"origin": "Baker", "destination": "North"}
    )
    assert resp.status_code == 500
    assert "not configured" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_distance_upstream_failure(app, client):
    _distance_client(
        app, lambda r: httpx.Response(200, json={"rows": [{"elements": [{"status": "NOT_FOUND"}]}]})
    )
    resp = await client.post(
        "/api/v1/distance", json={"origin": "Baker", "destination": "Nowhere"}
    )
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Distance lookup failed: NOT_FOUND"


# ── Menu ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_menu_for_current_meal(client):
    resp = await client.get("/api/v1/menu/West")
    assert resp.status_code == 200
    data = resp.json()
    assert data["meal_time"] == "lunch_dinner"
    assert {"id": "fries", "name": "French fries", "category": "Grill", "price": 2.5} in data["items"]


# ── Orders ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_order(client, people, route_provider):
    _use_routed(route_provider, 1.0)
    resp = await _place_order(client, people["customer"], delivery_location="Lovett 214")
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "Pending"
    assert data["payment_status"] == "Pending"
    assert data["items_subtotal"] == 5.00
    assert data["delivery_fee"] == 7.60
    assert data["total_amount"] == 12.60
    assert data["distance_provenance"] == "routed"
    assert data["delivery_location"] == "Lovett 214"
    assert data["delivery_lat"] == CAMPUS_USER.lat
    assert data["meal_time"] == "lunch_dinner"
    assert data["items"][0]["quantity"] == 2


@pytest.mark.asyncio
async def test_create_order_defaults_delivery_location(client, people):
    resp = await _place_order(client, people["customer"])
    assert resp.status_code == 201
    assert resp.json()["delivery_location"] == "Rice University Campus"


@pytest.mark.asyncio
async def test_create_order_without_location(client, people):
    body = {
        "customer_id": people["customer"],
        "servery": "Baker",
        "items": [{"id": "fries"}],
    }
    resp = await client.post("/api/v1/orders", json=body)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Enable location sharing and select a valid pickup point"


@pytest.mark.asyncio
async def test_create_order_with_empty_cart(client, people, route_provider):
    resp = await _place_order(client, people["customer"], items=[])
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Add at least one item to your cart"
    assert route_provider.calls == []


@pytest.mark.asyncio
async def test_create_order_with_off_menu_item(client, people):
    resp = await _place_order(client, people["customer"], items=[{"id": "bacon"}])
    assert resp.status_code == 400
    assert "lunch_dinner" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_create_order_unknown_customer(client, people):
    resp = await _place_order(client, "no-such-user")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_orders_newest_first(client, people):
    first = (await _place_order(client, people["customer"], servery="Baker")).json()
    second = (await _place_order(client, people["customer"], servery="South")).json()
    await _place_order(client, people["other"])

    resp = await client.get("/api/v1/orders", params={"customer_id": people["customer"]})
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_cancel_order_once(client, people):
    order = (await _place_order(client, people["customer"])).json()

    resp = await client.patch(f"/api/v1/orders/{order['id']}/cancel")
    assert resp.status_code == 200
    assert resp.json()["status"] == "Cancelled"

    resp = await client.patch(f"/api/v1/orders/{order['id']}/cancel")
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Cannot transition from Cancelled to Cancelled"


@pytest.mark.asyncio
async def test_cancel_missing_order(client):
    resp = await client.patch("/api/v1/orders/missing/cancel")
    assert resp.status_code == 404


# ── Dasher ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_dasher_feed_sorted_by_distance(client, people):
    baker = (await _place_order(client, people["customer"], servery="Baker")).json()
    north = (await _place_order(client, people["customer"], servery="North")).json()

    # Standing at North servery
    resp = await client.get("/api/v1/dasher/orders", params={"lat": 29.7184, "lng": -95.4018})
    assert resp.status_code == 200
    feed = resp.json()
    assert [o["id"] for o in feed] == [north["id"], baker["id"]]
    assert feed[0]["distance_miles"] == 0.0
    assert feed[0]["customer_name"] == "Ava Nguyen"
    assert feed[0]["customer_phone"] == "713-555-0101"
    assert feed[0]["pickup_coords"] == {"lat": 29.7184, "lng": -95.4018}
    assert feed[0]["minutes_ago"] == 0


@pytest.mark.asyncio
async def test_dasher_feed_without_position(client, people):
    await _place_order(client, people["other"])
    feed = (await client.get("/api/v1/dasher/orders")).json()
    assert len(feed) == 1
    assert feed[0]["customer_phone"] == "No phone provided"
    assert feed[0]["distance_miles"] == pytest.approx(0.17, abs=0.01)


@pytest.mark.asyncio
async def test_accept_and_deliver(client, people):
    order = (await _place_order(client, people["customer"])).json()
    url = f"/api/v1/dasher/orders/{order['id']}"

    resp = await client.patch(f"{url}/accept", json={"driver_id": people["dasher"]})
    assert resp.status_code == 200
    assert resp.json()["status"] == "Accepted"
    assert resp.json()["delivery_person_id"] == people["dasher"]

    pending = (await client.get("/api/v1/admin/pending-orders")).json()
    assert pending == []

    resp = await client.patch(f"{url}/deliver", json={"driver_id": people["dasher"]})
    assert resp.status_code == 200
    assert resp.json()["status"] == "Delivered"


@pytest.mark.asyncio
async def test_accept_requires_driver(client, people):
    order = (await _place_order(client, people["customer"])).json()
    resp = await client.patch(
        f"/api/v1/dasher/orders/{order['id']}/accept", json={"driver_id": people["other"]}
    )
    assert resp.status_code == 403
    assert resp.json()["detail"] == "User is not a delivery driver"


@pytest.mark.asyncio
async def test_accepted_order_keeps_its_driver(client, people):
    order = (await _place_order(client, people["customer"])).json()
    url = f"/api/v1/dasher/orders/{order['id']}"
    await client.patch(f"/api/v1/dasher/drivers/{people['other']}/status", json={"status": "Online"})
    await client.patch(f"{url}/accept", json={"driver_id": people["dasher"]})

    resp = await client.patch(f"{url}/accept", json={"driver_id": people["other"]})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Cannot transition from Accepted to Accepted"

    orders = (await client.get("/api/v1/orders", params={"customer_id": people["customer"]})).json()
    assert orders[0]["delivery_person_id"] == people["dasher"]


@pytest.mark.asyncio
async def test_deliver_by_other_driver(client, people):
    order = (await _place_order(client, people["customer"])).json()
    url = f"/api/v1/dasher/orders/{order['id']}"
    await client.patch(f"/api/v1/dasher/drivers/{people['other']}/status", json={"status": "Online"})
    await client.patch(f"{url}/accept", json={"driver_id": people["dasher"]})

    resp = await client.patch(f"{url}/deliver", json={"driver_id": people["other"]})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_deliver_unassigned_order_is_forbidden(client, people):
    order = (await _place_order(client, people["customer"])).json()
    resp = await client.patch(
        f"/api/v1/dasher/orders/{order['id']}/deliver", json={"driver_id": people["dasher"]}
    )
    # Unassigned orders belong to no driver yet
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_driver_status_and_availability(client, people):
    available = (await client.get("/api/v1/dasher/drivers/available")).json()
    assert [d["id"] for d in available] == [people["dasher"]]

    resp = await client.patch(
        f"/api/v1/dasher/drivers/{people['dasher']}/status", json={"status": "Offline"}
    )
    assert resp.status_code == 200
    assert resp.json()["driver_status"] == "Offline"

    available = (await client.get("/api/v1/dasher/drivers/available")).json()
    assert available == []


@pytest.mark.asyncio
async def test_driver_status_unknown_user(client):
    resp = await client.patch("/api/v1/dasher/drivers/ghost/status", json={"status": "Online"})
    assert resp.status_code == 404


# ── Admin ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_pending_orders(client, people):
    order = (await _place_order(client, people["customer"])).json()
    pending = (await client.get("/api/v1/admin/pending-orders")).json()
    assert [o["id"] for o in pending] == [order["id"]]
