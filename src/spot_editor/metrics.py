"""Prometheus metrics for the spot editor."""

from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

# Save outcomes
SPOT_SAVES = Counter(
    "spot_editor_saves_total",
    "Total number of replace-all saves by outcome",
    ["outcome"],
    registry=REGISTRY,
)

# Save latency histogram (in seconds)
SAVE_LATENCY = Histogram(
    "spot_editor_save_latency_seconds",
    "Time taken by the delete and insert round trips of a save",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
    registry=REGISTRY,
)

# Spots stored per scope after the last successful save
SAVED_SPOTS = Gauge(
    "spot_editor_saved_spots",
    "Number of spots stored by the last successful save",
    ["area_id", "camera_id"],
    registry=REGISTRY,
)

# Geometry edits
SPOT_EDITS = Counter(
    "spot_editor_edits_total",
    "Total number of in-memory spot edits",
    ["kind"],
    registry=REGISTRY,
)


def record_save(success: bool, latency_seconds: float) -> None:
    """Record the outcome and latency of a save."""
    SPOT_SAVES.labels(outcome="success" if success else "failure").inc()
    SAVE_LATENCY.observe(latency_seconds)


def update_saved_spots(area_id: int, camera_id: int, count: int) -> None:
    """Update the saved-spot gauge for a scope."""
    SAVED_SPOTS.labels(area_id=str(area_id), camera_id=str(camera_id)).set(count)


def record_edit(kind: str) -> None:
    """Count an edit (draw, move, delete, property)."""
    SPOT_EDITS.labels(kind=kind).inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
