from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "annotation-mcp-server"
    app_version: str = "1.0.0"

    host: str = "127.0.0.1"
    port: int = 8000

    log_level: str = "INFO"

    # Tool calls slower than this are reported at INFO level
    slow_operation_ms: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ANNOTATION_",
        extra="ignore"
    )

settings = Settings()
