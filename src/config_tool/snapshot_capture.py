"""Capture a snapshot from the camera stream for offline spot editing."""

import argparse
import sys
from pathlib import Path

from spot_editor.camera.stream import StreamClient
from spot_editor.config import CameraConfig, get_config_path, load_config


def capture_snapshot_for_config(
    camera: CameraConfig,
    output_path: str = "config/reference_snapshot.jpg",
) -> str:
    """
    Capture one frame from the camera for use in the spot editor.

    Args:
        camera: Stream endpoint of the camera
        output_path: Where to save the snapshot

    Returns:
        Path to saved snapshot
    """
    print(f"Connecting to camera stream at {camera.host}:{camera.port}...")

    with StreamClient(stream_url=camera.stream_url) as client:
        snapshot = client.read_jpeg()

    # Ensure output directory exists
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with open(output, "wb") as f:
        f.write(snapshot)

    print(f"Snapshot saved to: {output}")
    return str(output)


def main():
    """CLI entry point for capturing a snapshot."""
    print("=== Parking Spot Editor - Snapshot Capture ===\n")

    parser = argparse.ArgumentParser(description="Save one camera frame to disk")
    parser.add_argument("output", nargs="?", default="config/reference_snapshot.jpg")
    parser.add_argument("--config", help="Path to config.yaml")
    args = parser.parse_args()

    try:
        config = load_config(args.config or get_config_path())
        if config.camera is None:
            raise ValueError("No camera configured in config.yaml")

        capture_snapshot_for_config(config.camera, args.output)
        print("\nSnapshot captured successfully!")
        print(f"Now run: spot-editor-gui --image {args.output}")
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
