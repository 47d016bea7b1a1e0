"""Hero configuration."""

from pydantic_settings import BaseSettings


class HeroSettings(BaseSettings):
    """Hero settings, overridable via ``SCROLLSTAG_*`` environment variables."""

    # Frame sequence
    FRAME_COUNT: int = 60
    FRAME_PATTERN: str = "frame_{index:03d}.webp"
    LOAD_TIMEOUT: float = 5.0  # Seconds until rendering proceeds anyway
    FETCH_TIMEOUT: float = 10.0  # Per request

    # Canvas / scroll container
    CANVAS_WIDTH: int = 1280
    CANVAS_HEIGHT: int = 720
    SCROLL_HEIGHT_FACTOR: float = 3.0  # Container height in viewport heights

    # Content store (PostgREST dialect)
    CONTENT_URL: str = ""
    CONTENT_KEY: str = ""
    CONTENT_TABLE: str = "hero_services"

    # Offline preview: slide rows from a JSON file, frames from a directory
    SLIDES_FILE: str = ""
    ASSETS_DIR: str = ""

    # Preview server
    HOST: str = "127.0.0.1"
    PORT: int = 8090

    model_config = {"env_prefix": "SCROLLSTAG_"}


settings = HeroSettings()
