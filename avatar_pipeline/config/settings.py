from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "avatars"
    db_username: str = "avatars"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_connect_timeout_seconds: int = 10

    storage_backend: str = "supabase"
    storage_bucket: str = "avatars"
    storage_timeout_seconds: int = 30
    supabase_url: str = ""
    supabase_service_key: str = ""
    local_storage_root: str = "/app/files/avatars"
    local_storage_base_url: str = "/static/avatars"

    image_engine: str = "pillow"

    avatar_max_file_size_bytes: int = 10 * 1024 * 1024
    avatar_thumbnail_dimension: int = 100
    avatar_thumbnail_quality: float = 0.8
    avatar_temp_dir: str = ""

    progress_delivery: str = "sync"
