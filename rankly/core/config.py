from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Metrics engine
    # Policy for an empty competitor selection when the caller does not pass one explicitly:
    # True = keep every brand, False = keep only the owner brand.
    empty_selection_means_all: bool = True
    # Recompute share of voice / citation share from raw totals before ranking
    recompute_shares: bool = False
    rate_precision: int = 2
    depth_precision: int = 4

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if settings.rate_precision < 0 or settings.depth_precision < 0:
        errors.append("RATE_PRECISION and DEPTH_PRECISION must be non-negative")

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
