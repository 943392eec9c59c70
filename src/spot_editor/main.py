"""Main application entry point."""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from .api.router import init_router, router
from .camera.stream import StreamClient
from .config import AppConfig, get_config_path, load_config
from .store.rest import RestSpotStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global state
config: AppConfig | None = None
store: RestSpotStore | None = None
stream: StreamClient | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global config, store, stream

    logger.info("Starting Parking Spot Editor...")

    # Load configuration
    config_path = get_config_path()
    if not config_path.exists():
        logger.error(f"Configuration file not found: {config_path}")
        logger.error("Please create config/config.yaml from the example")
        sys.exit(1)

    config = load_config(config_path)
    logger.info(f"Loaded configuration from {config_path}")

    store = RestSpotStore(
        base_url=config.store.url,
        api_key=config.store.api_key,
        table=config.store.table,
        timeout=config.store.timeout_seconds,
    )
    logger.info(f"Using spot table '{config.store.table}' at {config.store.url}")

    if config.camera is not None:
        stream = StreamClient(stream_url=config.camera.stream_url)
        logger.info(f"Camera stream at {config.camera.host}:{config.camera.port}")
    else:
        logger.warning("No camera configured - snapshot endpoints disabled")

    init_router(store, stream)

    logger.info(f"Parking Spot Editor ready on http://{config.api.host}:{config.api.port}")

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down...")

    if stream:
        stream.release()

    if store:
        await store.close()

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Parking Spot Editor",
    description="API for configuring parking spot polygons over camera views",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


def main():
    """Run the application."""
    # Load config just to get API settings
    config_path = Path("config/config.yaml")
    if config_path.exists():
        cfg = load_config(config_path)
        host = cfg.api.host
        port = cfg.api.port
    else:
        host = "0.0.0.0"
        port = 8000

    uvicorn.run(
        "spot_editor.main:app",
        host=host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    main()
