from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Staff Portal"
    app_version: str = "0.1.0"
    environment: str = "dev"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    planday_client_id: str | None = None
    planday_refresh_token: str | None = None
    planday_token_url: str = "https://id.planday.com/connect/token"
    planday_api_base: str = "https://openapi.planday.com"
    upstream_timeout_seconds: float = 30.0

    google_api_key: str | None = None
    google_sheet_id: str | None = None
    sheets_api_base: str = "https://sheets.googleapis.com/v4/spreadsheets"

    payroll_target_pct: float = 35.0
    food_target_pct: float = 12.5
    drink_target_pct: float = 5.5

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
