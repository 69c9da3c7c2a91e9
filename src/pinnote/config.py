from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str
    port: int
    debug: bool
    cors_origins: list[str] = []
    live_queue_size: int = 100  # Buffered events per live subscriber before it is dropped
    live_keepalive_seconds: float = 30.0  # Interval of SSE keepalive comments on idle streams

    model_config = {
        "env_file": [".env"],
        "env_prefix": "PINNOTE_",
        "extra": "ignore",
    }
