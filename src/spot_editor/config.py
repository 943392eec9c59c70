"""Configuration models and loading utilities."""

import os
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import yaml
from pydantic import BaseModel, field_validator


def _resolve_env_reference(v):
    """Resolve environment variable references like ${VAR_NAME}."""
    if isinstance(v, str) and v.startswith("${") and v.endswith("}"):
        env_var = v[2:-1]
        return os.environ.get(env_var, "")
    return v


class StoreConfig(BaseModel):
    """Backing table store (PostgREST / Supabase) configuration."""

    url: str  # Project URL, e.g. https://xyz.supabase.co
    api_key: str = ""
    table: str = "parking_spots"
    timeout_seconds: float = 10.0

    @field_validator("api_key", mode="before")
    @classmethod
    def resolve_env_var(cls, v: str) -> str:
        return _resolve_env_reference(v)


class CameraConfig(BaseModel):
    """Live stream endpoint of the camera whose spots are edited."""

    host: str
    port: int = 80
    username: Optional[str] = None
    password: Optional[str] = None
    path: str = "/video"
    camera_id: int = 1  # Row id of the camera in the store
    area_id: int = 1  # Row id of the area the camera watches

    @field_validator("password", mode="before")
    @classmethod
    def resolve_env_var(cls, v: Optional[str]) -> Optional[str]:
        return _resolve_env_reference(v)

    @property
    def stream_url(self) -> str:
        """HTTP URL of the stream, with credentials when configured."""
        credentials = ""
        if self.username:
            credentials = quote(self.username, safe="")
            if self.password:
                credentials += ":" + quote(self.password, safe="")
            credentials += "@"
        return f"http://{credentials}{self.host}:{self.port}{self.path}"


class EditorConfig(BaseModel):
    """Spot editor window configuration."""

    vertex_tolerance_px: float = 10.0  # Click radius for grabbing a vertex
    window_width: int = 1280
    window_height: int = 720


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Main application configuration."""

    store: StoreConfig
    camera: Optional[CameraConfig] = None
    editor: EditorConfig = EditorConfig()
    api: APIConfig = APIConfig()


def load_config(path: str | Path) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f)

    return AppConfig(**data)


def get_config_path() -> Path:
    """Get the default configuration file path."""
    # Check for config in current directory first
    local_config = Path("config/config.yaml")
    if local_config.exists():
        return local_config

    # Check for config in parent directory (for Docker)
    parent_config = Path("/app/config/config.yaml")
    if parent_config.exists():
        return parent_config

    return local_config  # Return default even if doesn't exist
