"""Frame access for the surface spots are drawn on (live stream or static image)."""

import logging
import time
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class StreamClient:
    """
    Grabs frames from a camera's HTTP stream or from a static image.

    The editor only needs a frame to draw on and its pixel size; the
    stream itself is opaque and read with OpenCV.
    """

    def __init__(
        self,
        stream_url: Optional[str] = None,
        image_path: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 0.5,
    ):
        """
        Initialize the stream client.

        Args:
            stream_url: HTTP URL of the live stream
            image_path: Static image used instead of (or when missing) a stream
            max_retries: Attempts before giving up on the stream
            retry_delay: Seconds between attempts
        """
        if stream_url is None and image_path is None:
            raise ValueError("Either a stream URL or an image path is required")

        self.stream_url = stream_url
        self.image_path = image_path
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._capture: Optional[cv2.VideoCapture] = None
        self._static_frame: Optional[np.ndarray] = None

    @property
    def is_live(self) -> bool:
        return self.stream_url is not None

    def _open(self) -> Optional[cv2.VideoCapture]:
        if self._capture is not None and self._capture.isOpened():
            return self._capture

        cap = cv2.VideoCapture(self.stream_url)
        if not cap.isOpened():
            cap.release()
            return None

        cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)  # Minimize buffering
        self._capture = cap
        return cap

    def _load_static(self) -> np.ndarray:
        if self._static_frame is None:
            image = cv2.imread(self.image_path)
            if image is None:
                raise ValueError(f"Could not load image: {self.image_path}")
            self._static_frame = image
        return self._static_frame.copy()

    def read_frame(self) -> np.ndarray:
        """
        Read the current frame as a BGR array.

        Raises:
            RuntimeError: If the stream yields no frame after retries
            ValueError: If the static image cannot be loaded
        """
        if not self.is_live:
            return self._load_static()

        for attempt in range(self.max_retries):
            cap = self._open()
            if cap is None:
                logger.warning(
                    f"Failed to open camera stream (attempt {attempt + 1}/{self.max_retries})"
                )
            else:
                ret, frame = cap.read()
                if ret and frame is not None:
                    return frame

                logger.debug(f"Failed to read frame (attempt {attempt + 1}/{self.max_retries})")
                self.release()

            if attempt < self.max_retries - 1:
                time.sleep(self.retry_delay)

        if self.image_path is not None:
            logger.warning("Camera stream unavailable, falling back to static image")
            return self._load_static()

        raise RuntimeError(f"Could not read a frame from {self.stream_url}")

    def read_jpeg(self, quality: int = 90) -> bytes:
        """Read the current frame encoded as JPEG."""
        frame = self.read_frame()
        ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ok:
            raise RuntimeError("Failed to encode frame as JPEG")
        return buffer.tobytes()

    def release(self) -> None:
        """Close the stream."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def __enter__(self) -> "StreamClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
