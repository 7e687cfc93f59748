"""HTTP tests: routers, error payloads and the move endpoint end to end."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.errors import StorageError
from app.main import create_app


# ─── Fixtures ───


@pytest_asyncio.fixture
async def failing_client(engine, monkeypatch, request):
    """Client for an app with a route that fails in storage; the
    indirect parameter is the ``ENV`` the app runs under."""
    monkeypatch.setenv("ENV", request.param)
    get_settings.cache_clear()
    application = create_app()

    @application.get("/broken")
    async def broken():
        raise StorageError("Breaker move failed", detail="disk full at /var/x")

    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    get_settings.cache_clear()


async def _panel(client, name: str = "Main", size: int = 20) -> dict:
    resp = await client.post("/api/panels", json={"name": name, "size": size})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _breaker(client, panel_id: int, position: int, **fields) -> dict:
    body = {"panel_id": panel_id, "position": position, **fields}
    resp = await client.post("/api/breakers", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _circuit(client, breaker_id: int, **fields) -> dict:
    body = {"breaker_id": breaker_id, "type": "outlet", **fields}
    resp = await client.post("/api/circuits", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ═══════════════════════════════════════════════════════════
# Panels
# ═══════════════════════════════════════════════════════════


class TestPanelsApi:
    async def test_create_and_fetch(self, client):
        panel = await _panel(client, "  Main  ")
        assert panel["name"] == "Main"

        resp = await client.get(f"/api/panels/{panel['id']}")
        assert resp.status_code == 200
        assert resp.json()["size"] == 20

    async def test_duplicate_name(self, client):
        await _panel(client)
        resp = await client.post("/api/panels", json={"name": "Main", "size": 30})
        assert resp.status_code == 409
        assert resp.json() == {
            "error": "A panel with this name already exists",
            "kind": "conflict",
        }

    async def test_size_out_of_range(self, client):
        resp = await client.post("/api/panels", json={"name": "Tiny", "size": 10})
        assert resp.status_code == 400
        body = resp.json()
        assert body["kind"] == "validation"
        assert body["errors"][0]["field"] == "size"

    async def test_missing_panel(self, client):
        resp = await client.get("/api/panels/4242")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Panel not found", "kind": "not_found"}

    async def test_main_panels_listed_first(self, client):
        main = await _panel(client, "Main")
        shop = await _panel(client, "Annex", size=12)
        feed = await _breaker(client, main["id"], 1, breaker_type="double_pole")
        await _circuit(client, feed["id"], type="subpanel", subpanel_id=shop["id"])

        resp = await client.get("/api/panels")
        listed = [(p["name"], p["is_main"]) for p in resp.json()]
        assert listed == [("Main", True), ("Annex", False)]

    async def test_last_panel_cannot_be_deleted(self, client):
        panel = await _panel(client)
        resp = await client.delete(f"/api/panels/{panel['id']}")
        assert resp.status_code == 400
        assert resp.json()["kind"] == "validation"

    async def test_delete_cascades_to_breakers(self, client):
        keep = await _panel(client, "Main")
        gone = await _panel(client, "Old")
        breaker = await _breaker(client, gone["id"], 1)
        await _circuit(client, breaker["id"])

        resp = await client.delete(f"/api/panels/{gone['id']}")
        assert resp.status_code == 204
        assert (await client.get(f"/api/breakers/{breaker['id']}")).status_code == 404
        assert (await client.get("/api/circuits")).json() == []
        assert (await client.get(f"/api/panels/{keep['id']}")).status_code == 200

    async def test_shrink_below_breakers_rejected(self, client):
        panel = await _panel(client, size=20)
        await _breaker(client, panel["id"], 15, breaker_type="double_pole")

        resp = await client.put(f"/api/panels/{panel['id']}", json={"size": 16})
        assert resp.status_code == 400
        assert "15" in resp.json()["error"]

    async def test_complete_view(self, client):
        panel = await _panel(client)
        room = (
            await client.post("/api/rooms", json={"name": "Kitchen", "level": "main"})
        ).json()
        breaker = await _breaker(client, panel["id"], 1)
        await _circuit(client, breaker["id"], room_id=room["id"])

        resp = await client.get(f"/api/panels/{panel['id']}/complete")
        body = resp.json()
        assert body["panel"]["id"] == panel["id"]
        assert body["breakers"][0]["display_label"] == "Kitchen outlets"
        assert body["circuits"][0]["room_name"] == "Kitchen"
        assert body["circuits"][0]["position"] == 1


# ═══════════════════════════════════════════════════════════
# Breakers, rooms and circuits
# ═══════════════════════════════════════════════════════════


class TestBreakersApi:
    async def test_tandem_defaults_to_half_a(self, client):
        panel = await _panel(client)
        breaker = await _breaker(client, panel["id"], 4, breaker_type="tandem")
        assert breaker["slot"] == "A"

    async def test_address_taken(self, client):
        panel = await _panel(client)
        await _breaker(client, panel["id"], 4)
        resp = await client.post(
            "/api/breakers", json={"panel_id": panel["id"], "position": 4}
        )
        assert resp.status_code == 409
        assert resp.json()["kind"] == "conflict"

    async def test_unknown_panel(self, client):
        resp = await client.post("/api/breakers", json={"panel_id": 77, "position": 1})
        assert resp.status_code == 400
        assert resp.json()["kind"] == "invalid_reference"

    async def test_both_halves_at_position(self, client):
        panel = await _panel(client)
        await _breaker(client, panel["id"], 6, breaker_type="tandem", slot="A")
        await _breaker(client, panel["id"], 6, breaker_type="tandem", slot="B")

        url = f"/api/panels/{panel['id']}/breakers/position/6"
        both = (await client.get(url, params={"slot": "both"})).json()
        assert [b["slot"] for b in both] == ["A", "B"]
        assert (await client.get(url)).json() == []

    async def test_update_label(self, client):
        panel = await _panel(client)
        breaker = await _breaker(client, panel["id"], 2)
        resp = await client.put(
            f"/api/breakers/{breaker['id']}", json={"label": "Sump pump"}
        )
        assert resp.json()["display_label"] == "Sump pump"


class TestRoomsApi:
    async def test_rooms_ordered_by_level(self, client):
        for name, level in [("Yard", "outside"), ("Den", "main"), ("Attic", "upper")]:
            await client.post("/api/rooms", json={"name": name, "level": level})

        rooms = (await client.get("/api/rooms")).json()
        assert [r["name"] for r in rooms] == ["Attic", "Den", "Yard"]

    async def test_deleting_room_keeps_circuits(self, client):
        panel = await _panel(client)
        room = (await client.post("/api/rooms", json={"name": "Den", "level": "main"})).json()
        breaker = await _breaker(client, panel["id"], 1)
        circuit = await _circuit(client, breaker["id"], room_id=room["id"])

        assert (await client.delete(f"/api/rooms/{room['id']}")).status_code == 204
        fetched = (await client.get(f"/api/circuits/{circuit['id']}")).json()
        assert fetched["room_id"] is None


class TestCircuitsApi:
    async def test_subpanel_link_dropped_for_other_types(self, client):
        panel = await _panel(client)
        other = await _panel(client, "Shop")
        breaker = await _breaker(client, panel["id"], 1)
        circuit = await _circuit(client, breaker["id"], subpanel_id=other["id"])
        assert circuit["subpanel_id"] is None

    async def test_cannot_feed_own_panel(self, client):
        panel = await _panel(client)
        breaker = await _breaker(client, panel["id"], 1)
        resp = await client.post(
            "/api/circuits",
            json={"breaker_id": breaker["id"], "type": "subpanel", "subpanel_id": panel["id"]},
        )
        assert resp.status_code == 400

    async def test_deleting_last_circuit_removes_breaker(self, client):
        panel = await _panel(client)
        breaker = await _breaker(client, panel["id"], 1)
        first = await _circuit(client, breaker["id"])
        second = await _circuit(client, breaker["id"])

        await client.delete(f"/api/circuits/{first['id']}")
        assert (await client.get(f"/api/breakers/{breaker['id']}")).status_code == 200

        await client.delete(f"/api/circuits/{second['id']}")
        assert (await client.get(f"/api/breakers/{breaker['id']}")).status_code == 404


# ═══════════════════════════════════════════════════════════
# Moves
# ═══════════════════════════════════════════════════════════


class TestMoveApi:
    async def test_relocate(self, client):
        panel = await _panel(client)
        breaker = await _breaker(client, panel["id"], 1)
        circuit = await _circuit(client, breaker["id"])

        resp = await client.post(
            "/api/breakers/move",
            json={
                "sourceBreakerId": breaker["id"],
                "sourcePanelId": panel["id"],
                "sourcePosition": 1,
                "destinationPanelId": panel["id"],
                "destinationPosition": 5,
            },
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["message"] == "Breaker moved successfully"
        assert body["outcome"] == "relocated"
        assert body["source_deleted"] is True

        moved = (await client.get(f"/api/circuits/{circuit['id']}")).json()
        assert moved["position"] == 5
        assert moved["breaker_id"] == body["destination_breaker_id"]

    async def test_swap_with_snake_case_keys(self, client):
        panel = await _panel(client)
        a = await _breaker(client, panel["id"], 1)
        b = await _breaker(client, panel["id"], 2)
        await _circuit(client, a["id"])
        await _circuit(client, b["id"])

        resp = await client.post(
            "/api/breakers/move",
            json={
                "source_breaker_id": a["id"],
                "destination_panel_id": panel["id"],
                "destination_position": 2,
                "destination_slot": "single",
            },
        )
        assert resp.json()["outcome"] == "swapped"
        assert resp.json()["destination_breaker_id"] == b["id"]

    async def test_missing_source(self, client):
        panel = await _panel(client)
        resp = await client.post(
            "/api/breakers/move",
            json={
                "sourceBreakerId": 999,
                "destinationPanelId": panel["id"],
                "destinationPosition": 1,
            },
        )
        assert resp.status_code == 404
        assert resp.json() == {"error": "Source breaker not found", "kind": "not_found"}

    async def test_missing_destination_fields(self, client):
        resp = await client.post("/api/breakers/move", json={"sourceBreakerId": 1})
        assert resp.status_code == 400
        assert resp.json()["kind"] == "validation"

    async def test_unknown_destination_panel(self, client):
        panel = await _panel(client)
        breaker = await _breaker(client, panel["id"], 1)
        await _circuit(client, breaker["id"])

        resp = await client.post(
            "/api/breakers/move",
            json={
                "sourceBreakerId": breaker["id"],
                "destinationPanelId": 999,
                "destinationPosition": 1,
            },
        )
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "Invalid panel or breaker reference",
            "kind": "invalid_reference",
        }
        assert (await client.get(f"/api/breakers/{breaker['id']}")).status_code == 200

    async def test_preview(self, client):
        panel = await _panel(client)
        breaker = await _breaker(client, panel["id"], 3)
        await _circuit(client, breaker["id"], notes="Fridge")

        resp = await client.get(
            f"/api/breakers/{breaker['id']}/move-preview",
            params={"destination_panel_id": panel["id"], "destination_position": 8},
        )
        body = resp.json()
        assert body["operation"] == "relocate"
        assert "From: Main - Position 3" in body["lines"]
        assert "  - No Room - outlet - Fridge" in body["lines"]


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestStorageErrorDetail:
    @pytest.mark.parametrize("failing_client", ["production"], indirect=True)
    async def test_detail_hidden_in_production(self, failing_client):
        resp = await failing_client.get("/broken")
        assert resp.status_code == 500
        body = resp.json()
        assert body == {"error": "Breaker move failed", "kind": "internal"}
        assert "detail" not in body

    @pytest.mark.parametrize("failing_client", ["development"], indirect=True)
    async def test_detail_shown_in_development(self, failing_client):
        resp = await failing_client.get("/broken")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "disk full at /var/x"
