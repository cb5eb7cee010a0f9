from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    signing_key: str  # Shared secret for JWT signing and the session cookie codec
    host: str = "127.0.0.1"
    port: int = 7777
    debug: bool = False
    database_url: str = "mongodb://localhost:27017/webfiles"
    cors_origins: list[str] = []
    files_path: str = "uploads"  # Root directory of the content-addressed store
    max_file_size: int = 32 << 22  # Largest accepted upload, in bytes
    token_lifetime_hours: int = 24
    session_cookie_name: str = "webfilesJWTSession"
    session_max_age: int = 30 * 24 * 60 * 60  # Cookie max-age and stored session TTL, in seconds
    cookie_secure: bool = False  # Set to True when served over HTTPS

    model_config = {
        "env_file": [".env"],
        "env_prefix": "WEBFILES_",
        "extra": "ignore",
    }
