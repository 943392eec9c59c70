"""Interactive editing of parking spot polygons for one camera view."""

import logging
import string
from typing import Iterable, Optional, Sequence

from ..exceptions import SpotIdsExhaustedError
from ..geometry.hit_test import (
    DEFAULT_VERTEX_TOLERANCE_PX,
    centroid,
    find_spot_at,
    nearest_vertex,
    translate,
)
from ..geometry.transform import CoordinateTransform
from ..metrics import record_edit
from ..state.models import (
    EditMode,
    Point,
    SaveResult,
    Selection,
    Spot,
    SpotScope,
    SpotStatus,
    SpotType,
    SurfaceSize,
)
from ..store.base import SpotStore
from .saver import SaveCallback, SpotSaver

logger = logging.getLogger(__name__)

VERTICES_PER_SPOT = 4


def candidate_spot_ids() -> Iterable[str]:
    """Spot labels in generation order: A1..A9, B1..B9, ..., Z9."""
    for letter in string.ascii_uppercase:
        for number in range(1, 10):
            yield f"{letter}{number}"


def generate_spot_id(existing_ids: Iterable[str]) -> str:
    """
    Return the first label not already in use.

    Raises:
        SpotIdsExhaustedError: If all 234 labels are taken
    """
    taken = set(existing_ids)
    for candidate in candidate_spot_ids():
        if candidate not in taken:
            return candidate
    raise SpotIdsExhaustedError("All spot ids from A1 to Z9 are in use")


class SpotGeometryEditor:
    """
    Editing session for the spots of one (area, camera) pair.

    Pointer events arrive in surface pixels and are converted to
    normalized coordinates before touching the model. Every edit
    replaces the working tuple of spots with a new one, so a tuple
    handed out earlier (for display or saving) never changes.

    Modes:
        select: click a vertex or the inside of a spot to select it
        draw: four clicks place the corners of a new spot
        move: drag the selected vertex, or the whole selected spot
    """

    def __init__(
        self,
        store: SpotStore,
        area_id: int,
        camera_id: int,
        initial_spots: Sequence[Spot] = (),
        surface_size: Optional[SurfaceSize] = None,
        on_save: Optional[SaveCallback] = None,
        vertex_tolerance_px: float = DEFAULT_VERTEX_TOLERANCE_PX,
    ):
        """
        Initialize the editor.

        Args:
            store: Persistence collaborator used by save()
            area_id: Area the edited spots belong to
            camera_id: Camera the edited spots belong to
            initial_spots: Already decoded spots to start from
            surface_size: Current rendered size of the surface, if known
            on_save: Called with the saved spots after a successful save
            vertex_tolerance_px: Pixel radius for vertex hit testing
        """
        self.scope = SpotScope(area_id=area_id, camera_id=camera_id)
        self.transform = CoordinateTransform(surface_size)
        self.vertex_tolerance_px = vertex_tolerance_px
        self._saver = SpotSaver(store, on_save=on_save)

        self._spots: tuple[Spot, ...] = tuple(initial_spots)
        self._mode = EditMode.SELECT
        self._selection: Optional[Selection] = None
        self._draft: tuple[Point, ...] = ()
        self._dragging = False

        logger.info(
            f"Editing {len(self._spots)} spot(s) for area {area_id}, camera {camera_id}"
        )

    # ------------------------------------------------------------------
    # Read-only state

    @property
    def spots(self) -> tuple[Spot, ...]:
        return self._spots

    @property
    def mode(self) -> EditMode:
        return self._mode

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    @property
    def draft_vertices(self) -> tuple[Point, ...]:
        return self._draft

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    @property
    def is_saving(self) -> bool:
        return self._saver.is_saving

    @property
    def selected_spot(self) -> Optional[Spot]:
        if self._selection is None:
            return None
        return self._spots[self._selection.spot_index]

    @property
    def area_id(self) -> int:
        return self.scope.area_id

    @property
    def camera_id(self) -> int:
        return self.scope.camera_id

    def update_surface(self, width: float, height: float) -> None:
        """Re-read the surface size after a resize or a new frame."""
        self.transform.update_surface(width, height)

    # ------------------------------------------------------------------
    # Mode changes

    def set_mode(self, mode: EditMode) -> bool:
        """
        Switch the editing mode.

        Entering move mode without a selection is ignored. Entering draw
        mode starts a fresh draft and clears the selection; leaving it
        discards an unfinished draft.

        Returns:
            True if the mode changed
        """
        mode = EditMode(mode)

        if mode == EditMode.MOVE and self._selection is None:
            logger.debug("Move mode needs a selected spot")
            return False

        if mode == EditMode.DRAW:
            self._draft = ()
            self._selection = None
        elif self._mode == EditMode.DRAW:
            self._draft = ()

        self._dragging = False
        self._mode = mode
        logger.debug(f"Editor mode: {mode.value}")
        return True

    def cancel_drawing(self) -> None:
        """Drop the unfinished spot and go back to select mode."""
        if self._draft:
            logger.debug(f"Discarded draft with {len(self._draft)} point(s)")
        self._draft = ()
        self._mode = EditMode.SELECT

    # ------------------------------------------------------------------
    # Pointer events (surface pixels)

    def pointer_down(self, pixel_x: float, pixel_y: float) -> None:
        """Handle a click on the surface."""
        position = self.transform.to_normalized(pixel_x, pixel_y)

        if self._mode == EditMode.DRAW:
            self._add_draft_point(position)
        elif self._mode == EditMode.SELECT:
            self._select_at(position)
        elif self._mode == EditMode.MOVE and self._selection is not None:
            self._dragging = True

    def pointer_move(self, pixel_x: float, pixel_y: float) -> None:
        """Handle pointer motion; only acts while a move drag is armed."""
        if self._mode != EditMode.MOVE or not self._dragging or self._selection is None:
            return

        position = self.transform.to_normalized(pixel_x, pixel_y)
        spot = self._spots[self._selection.spot_index]

        if self._selection.vertex_index is not None:
            vertices = tuple(
                position if index == self._selection.vertex_index else vertex
                for index, vertex in enumerate(spot.vertices)
            )
        else:
            center = centroid(spot.vertices)
            vertices = translate(spot.vertices, position.x - center.x, position.y - center.y)

        self._replace_spot(self._selection.spot_index, spot.model_copy(update={"vertices": vertices}))

    def pointer_up(self) -> None:
        """Finish a drag."""
        if self._dragging:
            self._dragging = False
            record_edit("move")

    def _add_draft_point(self, position: Point) -> None:
        draft = self._draft + (position,)

        if len(draft) < VERTICES_PER_SPOT:
            self._draft = draft
            return

        try:
            spot_id = generate_spot_id(s.id for s in self._spots)
        except SpotIdsExhaustedError as e:
            logger.warning(f"Discarding drawn spot: {e}")
            self._draft = ()
            self._mode = EditMode.SELECT
            return

        spot = Spot(
            id=spot_id,
            vertices=draft,
            type=SpotType.STANDARD,
            status=SpotStatus.AVAILABLE,
            area_id=self.scope.area_id,
            camera_id=self.scope.camera_id,
        )
        self._spots = self._spots + (spot,)
        self._selection = Selection(spot_index=len(self._spots) - 1)
        self._draft = ()
        self._mode = EditMode.SELECT

        record_edit("draw")
        logger.info(f"Added spot {spot.id}")

    def _select_at(self, position: Point) -> None:
        hit = nearest_vertex(position, self._spots, self.transform, self.vertex_tolerance_px)
        if hit is not None:
            self._selection = Selection(spot_index=hit[0], vertex_index=hit[1])
            return

        spot_index = find_spot_at(position, self._spots)
        self._selection = None if spot_index is None else Selection(spot_index=spot_index)

    # ------------------------------------------------------------------
    # Spot edits

    def _replace_spot(self, index: int, spot: Spot) -> None:
        self._spots = tuple(spot if i == index else s for i, s in enumerate(self._spots))

    def delete_selected(self) -> Optional[Spot]:
        """
        Remove the selected spot.

        Returns:
            The removed spot, or None if nothing was selected
        """
        if self._selection is None:
            return None

        index = self._selection.spot_index
        removed = self._spots[index]
        self._spots = tuple(s for i, s in enumerate(self._spots) if i != index)
        self._selection = None
        self._dragging = False
        if self._mode == EditMode.MOVE:
            self._mode = EditMode.SELECT

        record_edit("delete")
        logger.info(f"Deleted spot {removed.id}")
        return removed

    def _update_selected(self, **fields) -> bool:
        if self._selection is None:
            return False
        spot = self._spots[self._selection.spot_index]
        self._replace_spot(self._selection.spot_index, spot.model_copy(update=fields))
        record_edit("property")
        return True

    def set_spot_type(self, spot_type: SpotType) -> bool:
        """Change the type of the selected spot."""
        return self._update_selected(type=SpotType(spot_type))

    def set_spot_status(self, status: SpotStatus) -> bool:
        """Change the status of the selected spot."""
        return self._update_selected(status=SpotStatus(status))

    def rename_selected(self, spot_id: str) -> bool:
        """
        Change the id of the selected spot.

        Uniqueness is not checked here; duplicates are only reported
        when saving.
        """
        return self._update_selected(id=spot_id)

    def set_vertex_pixels(
        self,
        vertex_index: int,
        pixel_x: Optional[float] = None,
        pixel_y: Optional[float] = None,
    ) -> bool:
        """Set one coordinate (or both) of a vertex of the selected spot from pixel values."""
        spot = self.selected_spot
        if spot is None or not 0 <= vertex_index < VERTICES_PER_SPOT:
            return False

        # Pixel input means nothing before the surface is measured
        if not self.transform.surface_size.is_measured:
            return False

        vertex = spot.vertices[vertex_index]
        x = vertex.x if pixel_x is None else self.transform.to_normalized(pixel_x, 0).x
        y = vertex.y if pixel_y is None else self.transform.to_normalized(0, pixel_y).y

        vertices = tuple(
            Point(x=x, y=y) if i == vertex_index else v
            for i, v in enumerate(spot.vertices)
        )
        return self._update_selected(vertices=vertices)

    # ------------------------------------------------------------------
    # Persistence

    async def save(self) -> SaveResult:
        """
        Replace the stored spots of this editor's scope with the working set.

        The working set is left untouched whatever the outcome.

        Raises:
            SaveInProgressError: If a save is already running
        """
        return await self._saver.save(self._spots, self.scope)
