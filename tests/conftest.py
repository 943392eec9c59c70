"""Shared fixtures: an in-memory spot store and ready-made spots."""

import pytest

from spot_editor.exceptions import StoreError
from spot_editor.state.models import Point, Spot, SpotScope, SurfaceSize
from spot_editor.store.base import SpotStore


class FakeSpotStore(SpotStore):
    """Keeps rows in a list and can be told to fail a phase."""

    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.fail_delete = False
        self.fail_insert = False
        self.calls = []

    @staticmethod
    def _matches(row, scope):
        return row["area_id"] == scope.area_id and row["camera_id"] == scope.camera_id

    async def fetch(self, scope: SpotScope):
        self.calls.append("fetch")
        return [dict(r) for r in self.rows if self._matches(r, scope)]

    async def delete_where(self, scope: SpotScope):
        self.calls.append("delete")
        if self.fail_delete:
            raise StoreError("delete failed")
        self.rows = [r for r in self.rows if not self._matches(r, scope)]

    async def insert_many(self, rows):
        self.calls.append("insert")
        if self.fail_insert:
            raise StoreError("insert failed")
        self.rows.extend(dict(r) for r in rows)
        return [dict(r) for r in rows]


def make_spot(spot_id="A1", x=0.1, y=0.1, size=0.4, area_id=1, camera_id=2, **kwargs):
    """Axis-aligned square spot with its top-left corner at (x, y)."""
    return Spot(
        id=spot_id,
        vertices=[
            Point(x=x, y=y),
            Point(x=x + size, y=y),
            Point(x=x + size, y=y + size),
            Point(x=x, y=y + size),
        ],
        area_id=area_id,
        camera_id=camera_id,
        **kwargs,
    )


@pytest.fixture
def store():
    return FakeSpotStore()


@pytest.fixture
def surface():
    return SurfaceSize(width=1000, height=500)


@pytest.fixture
def square():
    return make_spot()
