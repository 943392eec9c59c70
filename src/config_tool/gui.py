"""Interactive GUI tool for drawing parking spot polygons over a camera view."""

import argparse
import asyncio
import logging
import sys
from typing import Callable, Optional

import cv2
import numpy as np

from spot_editor.camera.stream import StreamClient
from spot_editor.config import AppConfig, get_config_path, load_config
from spot_editor.editor.spot_editor import SpotGeometryEditor
from spot_editor.exceptions import SaveInProgressError, SpotEditorError
from spot_editor.rendering import render_editor
from spot_editor.state.models import EditMode, SpotScope, SpotStatus, SpotType, SurfaceSize
from spot_editor.store.base import SpotStore
from spot_editor.store.codec import decode_rows
from spot_editor.store.rest import RestSpotStore

logger = logging.getLogger(__name__)

MODE_KEYS = {
    ord("s"): EditMode.SELECT,
    ord("d"): EditMode.DRAW,
    ord("m"): EditMode.MOVE,
}

DRAFT_PROMPTS = [
    "Click to place the first corner of the parking spot",
    "Click to place the second corner",
    "Click to place the third corner",
    "Click to place the final corner",
]


def _cycle(enum_cls, current):
    members = list(enum_cls)
    return members[(members.index(current) + 1) % len(members)]


class SpotEditorWindow:
    """
    OpenCV window acting as the rendering surface of a SpotGeometryEditor.

    Usage:
        S / D / M: select, draw or move mode
        Click: select a vertex or spot, place a corner, or drag
        C: cancel the spot being drawn
        X: delete the selected spot
        T / P: cycle type / status of the selected spot
        R: rename the selected spot (id typed in the terminal)
        V: set a vertex of the selected spot from pixel coordinates
        W: save all spots (replaces the stored set)
        Q: quit
    """

    WINDOW_NAME = "Parking Spot Editor"

    def __init__(
        self,
        editor: SpotGeometryEditor,
        frames: StreamClient,
        loop: asyncio.AbstractEventLoop,
        window_size: tuple[int, int] = (1280, 720),
        prompt: Callable[[str], str] = input,
    ):
        """
        Initialize the window.

        Args:
            editor: Editing session for one (area, camera) pair
            frames: Source of the frames spots are drawn over
            loop: Event loop the store's client lives on; saves run on it
            window_size: Initial window size in pixels
            prompt: Reads a line of text from the operator
        """
        self.editor = editor
        self.frames = frames
        self.window_size = window_size
        self.prompt = prompt
        self.status_line = ""
        self._loop = loop

    def _mouse_callback(self, event, x, y, flags, param):
        """Forward mouse events to the editor."""
        if event == cv2.EVENT_LBUTTONDOWN:
            self.editor.pointer_down(x, y)
        elif event == cv2.EVENT_MOUSEMOVE:
            self.editor.pointer_move(x, y)
        elif event == cv2.EVENT_LBUTTONUP:
            self.editor.pointer_up()

    def _instructions(self) -> list[str]:
        lines = [f"Mode: {self.editor.mode.value}  ({len(self.editor.spots)} spots)"]

        if self.editor.mode == EditMode.DRAW:
            placed = len(self.editor.draft_vertices)
            lines.append(f"{DRAFT_PROMPTS[placed]} ({placed}/4 points)  C: cancel")

        spot = self.editor.selected_spot
        if spot is not None:
            lines.append(f"Selected {spot.id}: {spot.type.value}, {spot.status.value}")

        lines.append("S/D/M: mode  X: delete  T/P: type/status  R: rename  V: vertex  W: save  Q: quit")
        if self.status_line:
            lines.append(self.status_line)
        return lines

    def render(self, frame: np.ndarray) -> np.ndarray:
        """Draw the editor state over a frame, re-measuring the surface first."""
        height, width = frame.shape[:2]
        self.editor.update_surface(width, height)

        image = render_editor(
            frame,
            self.editor.spots,
            self.editor.transform,
            selection=self.editor.selection,
            draft=self.editor.draft_vertices,
        )

        y_offset = 30
        for line in self._instructions():
            cv2.putText(
                image,
                line,
                (10, y_offset),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.5,
                (255, 255, 255),
                1,
            )
            y_offset += 20
        return image

    def handle_key(self, key: int) -> bool:
        """
        Apply a key press.

        Returns:
            False when the window should close
        """
        if key == ord("q"):
            return False

        if key in MODE_KEYS:
            if not self.editor.set_mode(MODE_KEYS[key]):
                self.status_line = "Select a spot before switching to move mode"
        elif key == ord("c"):
            self.editor.cancel_drawing()
        elif key == ord("x"):
            removed = self.editor.delete_selected()
            if removed is not None:
                self.status_line = f"Deleted {removed.id}"
        elif key == ord("t") and self.editor.selected_spot is not None:
            self.editor.set_spot_type(_cycle(SpotType, self.editor.selected_spot.type))
        elif key == ord("p") and self.editor.selected_spot is not None:
            self.editor.set_spot_status(_cycle(SpotStatus, self.editor.selected_spot.status))
        elif key == ord("r"):
            self.rename()
        elif key == ord("v"):
            self.edit_vertex()
        elif key == ord("w"):
            self.save()

        return True

    def rename(self) -> None:
        """Ask for a new id for the selected spot."""
        spot = self.editor.selected_spot
        if spot is None:
            self.status_line = "Select a spot to rename"
            return

        new_id = self.prompt(f"New id for {spot.id} (blank keeps it): ").strip()
        if new_id and self.editor.rename_selected(new_id):
            self.status_line = f"Renamed {spot.id} to {new_id}"

    def edit_vertex(self) -> None:
        """
        Ask for pixel coordinates of one vertex of the selected spot.

        The selected vertex is edited when there is one; otherwise the
        vertex number (1-4) is asked for first. A blank coordinate keeps
        its current value.
        """
        spot = self.editor.selected_spot
        if spot is None:
            self.status_line = "Select a spot to edit its vertices"
            return

        try:
            vertex_index = self.editor.selection.vertex_index
            if vertex_index is None:
                vertex_index = int(self.prompt("Vertex number (1-4): ")) - 1
            if not 0 <= vertex_index < len(spot.vertices):
                self.status_line = "Vertex number must be between 1 and 4"
                return

            current_x, current_y = self.editor.transform.to_pixels(spot.vertices[vertex_index])
            raw_x = self.prompt(f"X in pixels (blank keeps {current_x:.0f}): ").strip()
            raw_y = self.prompt(f"Y in pixels (blank keeps {current_y:.0f}): ").strip()
            pixel_x = float(raw_x) if raw_x else None
            pixel_y = float(raw_y) if raw_y else None
        except ValueError:
            self.status_line = "Invalid number, vertex unchanged"
            return

        if self.editor.set_vertex_pixels(vertex_index, pixel_x, pixel_y):
            self.status_line = f"Moved vertex {vertex_index + 1} of {spot.id}"
        else:
            self.status_line = "Vertex unchanged"

    def save(self) -> None:
        """Run a save and show its outcome."""
        if self.editor.is_saving:
            return

        try:
            result = self._loop.run_until_complete(self.editor.save())
        except SaveInProgressError:
            return

        if result.success:
            self.status_line = f"Configuration saved: {result.message}"
        else:
            self.status_line = f"Error saving configuration: {result.message}"
        print(self.status_line)

    def run(self) -> None:
        """Run the interactive editor until the user quits."""
        cv2.namedWindow(self.WINDOW_NAME, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.WINDOW_NAME, *self.window_size)
        cv2.setMouseCallback(self.WINDOW_NAME, self._mouse_callback)

        try:
            while True:
                frame = self.frames.read_frame()
                cv2.imshow(self.WINDOW_NAME, self.render(frame))
                key = cv2.waitKey(30) & 0xFF

                if key != 0xFF and not self.handle_key(key):
                    break
        finally:
            cv2.destroyAllWindows()
            self.frames.release()


async def load_initial_spots(store: SpotStore, scope: SpotScope):
    """Fetch and decode the stored spots for a scope."""
    rows = await store.fetch(scope)
    return decode_rows(rows)


def run_editor(
    config: AppConfig,
    area_id: int,
    camera_id: int,
    image_path: Optional[str] = None,
) -> None:
    """
    Open the editor for one (area, camera) pair.

    Args:
        config: Application configuration (store and camera)
        area_id: Area whose spots are edited
        camera_id: Camera whose spots are edited
        image_path: Static image to draw on instead of the live stream
    """
    stream_url = None
    if image_path is None:
        if config.camera is None:
            raise ValueError("No camera configured; pass an image path instead")
        # The configured stream only shows the configured camera
        if camera_id != config.camera.camera_id:
            raise ValueError(
                f"The configured stream belongs to camera {config.camera.camera_id}, "
                f"not camera {camera_id}; pass an image from camera {camera_id} instead"
            )
        stream_url = config.camera.stream_url

    store = RestSpotStore(
        base_url=config.store.url,
        api_key=config.store.api_key,
        table=config.store.table,
        timeout=config.store.timeout_seconds,
    )
    scope = SpotScope(area_id=area_id, camera_id=camera_id)

    frames = StreamClient(stream_url=stream_url, image_path=image_path)
    loop = asyncio.new_event_loop()

    try:
        initial_spots = loop.run_until_complete(load_initial_spots(store, scope))
        print(f"Loaded {len(initial_spots)} spot(s) for area {area_id}, camera {camera_id}")

        first_frame = frames.read_frame()
        height, width = first_frame.shape[:2]

        editor = SpotGeometryEditor(
            store=store,
            area_id=area_id,
            camera_id=camera_id,
            initial_spots=initial_spots,
            surface_size=SurfaceSize(width=width, height=height),
            vertex_tolerance_px=config.editor.vertex_tolerance_px,
        )

        window = SpotEditorWindow(
            editor,
            frames,
            loop,
            window_size=(config.editor.window_width, config.editor.window_height),
        )
        window.run()
    finally:
        frames.release()
        loop.run_until_complete(store.close())
        loop.close()


def main():
    """CLI entry point for the spot editor GUI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Draw parking spots over a camera view")
    parser.add_argument("--area", type=int, help="Area id (defaults to camera.area_id)")
    parser.add_argument("--camera", type=int, help="Camera id (defaults to camera.camera_id)")
    parser.add_argument("--image", help="Static snapshot to draw on instead of the live stream")
    parser.add_argument("--config", help="Path to config.yaml")
    args = parser.parse_args()

    try:
        config = load_config(args.config or get_config_path())
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    area_id = args.area if args.area is not None else (config.camera.area_id if config.camera else None)
    camera_id = args.camera if args.camera is not None else (config.camera.camera_id if config.camera else None)
    if area_id is None or camera_id is None:
        print("Error: --area and --camera are required when no camera is configured")
        sys.exit(1)

    try:
        run_editor(config, area_id, camera_id, image_path=args.image)
    except (ValueError, RuntimeError, SpotEditorError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
