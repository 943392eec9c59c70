# tests/test_store.py
"""Unit tests for row decoding and the REST spot store."""

import json

import httpx
import pytest

from spot_editor.exceptions import SpotDecodeError, StoreError
from spot_editor.state.models import Point, SpotScope, SpotStatus, SpotType
from spot_editor.store.codec import decode_rows, spot_from_row, spot_to_row
from spot_editor.store.rest import RestSpotStore

from conftest import make_spot

SCOPE = SpotScope(area_id=1, camera_id=2)


def make_row(**overrides):
    row = {
        "spot_id": "A1",
        "vertices": [
            {"x": 0.1, "y": 0.1},
            {"x": 0.5, "y": 0.1},
            {"x": 0.5, "y": 0.5},
            {"x": 0.1, "y": 0.5},
        ],
        "type": "electric",
        "status": "occupied",
        "area_id": 1,
        "camera_id": 2,
    }
    row.update(overrides)
    return row


class TestCodec:
    def test_spot_to_row(self):
        row = spot_to_row(make_spot("B3", status=SpotStatus.RESERVED), SCOPE)
        assert row == {
            "spot_id": "B3",
            "vertices": [
                {"x": 0.1, "y": 0.1},
                {"x": 0.5, "y": 0.1},
                {"x": 0.5, "y": 0.5},
                {"x": 0.1, "y": 0.5},
            ],
            "type": "standard",
            "status": "reserved",
            "area_id": 1,
            "camera_id": 2,
        }

    def test_spot_from_row(self):
        spot = spot_from_row(make_row())
        assert spot.id == "A1"
        assert spot.vertices[2] == Point(x=0.5, y=0.5)
        assert spot.type == SpotType.ELECTRIC
        assert spot.status == SpotStatus.OCCUPIED
        assert (spot.area_id, spot.camera_id) == (1, 2)

    def test_extra_columns_are_ignored(self):
        spot = spot_from_row(make_row(id=77, created_at="2024-01-01T00:00:00Z"))
        assert spot.id == "A1"

    def test_missing_column(self):
        row = make_row()
        del row["status"]
        with pytest.raises(SpotDecodeError, match="status"):
            spot_from_row(row)

    def test_wrong_vertex_count(self):
        with pytest.raises(SpotDecodeError):
            spot_from_row(make_row(vertices=[{"x": 0.1, "y": 0.1}] * 3))

    def test_vertices_not_a_list(self):
        with pytest.raises(SpotDecodeError):
            spot_from_row(make_row(vertices=None))
        with pytest.raises(SpotDecodeError):
            spot_from_row(make_row(vertices=12))

    def test_unknown_enum_value(self):
        with pytest.raises(SpotDecodeError):
            spot_from_row(make_row(type="motorcycle"))
        with pytest.raises(SpotDecodeError):
            spot_from_row(make_row(status="unknown"))

    def test_non_numeric_coordinate(self):
        vertices = make_row()["vertices"]
        vertices[0] = {"x": "left", "y": 0.1}
        with pytest.raises(SpotDecodeError):
            spot_from_row(make_row(vertices=vertices))

    @pytest.mark.parametrize("spot_id", [None, 123, ""])
    def test_invalid_spot_id(self, spot_id):
        with pytest.raises(SpotDecodeError, match="spot_id"):
            spot_from_row(make_row(spot_id=spot_id))

    def test_not_a_dict(self):
        with pytest.raises(SpotDecodeError):
            spot_from_row(["A1"])

    def test_decode_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            spot_from_row({})

    def test_decode_rows_fails_on_first_bad_row(self):
        with pytest.raises(SpotDecodeError) as exc_info:
            decode_rows([make_row(), make_row(spot_id="A2", type="bus")])
        assert exc_info.value.row["spot_id"] == "A2"


def make_store(handler):
    client = httpx.AsyncClient(
        base_url="https://example.supabase.co",
        transport=httpx.MockTransport(handler),
    )
    return RestSpotStore("https://example.supabase.co", api_key="secret", client=client)


class TestRestSpotStore:
    @pytest.mark.asyncio
    async def test_fetch_filters_by_scope(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json=[make_row()])

        store = make_store(handler)
        rows = await store.fetch(SCOPE)

        request = seen["request"]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/parking_spots"
        assert request.url.params["camera_id"] == "eq.2"
        assert request.url.params["area_id"] == "eq.1"
        assert request.url.params["select"] == "*"
        assert request.headers["apikey"] == "secret"
        assert request.headers["authorization"] == "Bearer secret"
        assert rows == [make_row()]

    @pytest.mark.asyncio
    async def test_delete_where(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(204)

        await make_store(handler).delete_where(SCOPE)

        request = seen["request"]
        assert request.method == "DELETE"
        assert request.url.params["camera_id"] == "eq.2"
        assert request.url.params["area_id"] == "eq.1"

    @pytest.mark.asyncio
    async def test_insert_many_returns_representation(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(201, json=json.loads(request.content))

        rows = [make_row(), make_row(spot_id="A2")]
        inserted = await make_store(handler).insert_many(rows)

        request = seen["request"]
        assert request.method == "POST"
        assert request.headers["prefer"] == "return=representation"
        assert json.loads(request.content) == rows
        assert inserted == rows

    @pytest.mark.asyncio
    async def test_replace_all_deletes_then_inserts(self):
        methods = []

        def handler(request):
            methods.append(request.method)
            if request.method == "POST":
                return httpx.Response(201, json=json.loads(request.content))
            return httpx.Response(204)

        await make_store(handler).replace_all(SCOPE, [make_row()])
        assert methods == ["DELETE", "POST"]

    @pytest.mark.asyncio
    async def test_replace_all_stops_when_delete_fails(self):
        methods = []

        def handler(request):
            methods.append(request.method)
            return httpx.Response(500, text="database unavailable")

        with pytest.raises(StoreError, match="500"):
            await make_store(handler).replace_all(SCOPE, [make_row()])
        assert methods == ["DELETE"]

    @pytest.mark.asyncio
    async def test_transport_error_becomes_store_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StoreError):
            await make_store(handler).fetch(SCOPE)

    @pytest.mark.asyncio
    async def test_custom_table(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json=[])

        client = httpx.AsyncClient(
            base_url="https://example.supabase.co",
            transport=httpx.MockTransport(handler),
        )
        store = RestSpotStore("https://example.supabase.co/", table="spots_v2", client=client)
        await store.fetch(SCOPE)

        assert seen["path"] == "/rest/v1/spots_v2"

    @pytest.mark.asyncio
    async def test_non_json_body_becomes_store_error(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "text/plain"})

        store = make_store(handler)
        with pytest.raises(StoreError, match="non-JSON"):
            await store.fetch(SCOPE)
        with pytest.raises(StoreError, match="non-JSON"):
            await store.insert_many([make_row()])

    @pytest.mark.asyncio
    async def test_fetch_rejects_non_list_body(self):
        def handler(request):
            return httpx.Response(200, json={"message": "ok"})

        with pytest.raises(StoreError, match="expected a list"):
            await make_store(handler).fetch(SCOPE)
