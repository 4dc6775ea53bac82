from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    api_key: str = "dev-key"
    database_url: str = "sqlite:///uph.db"

    # shift times are local clock times in this zone
    timezone: str = "UTC"
    frontend_url: str = "http://localhost:3000"

    # used when a quick increment creates today's log
    default_start_time: str = "09:00"
    default_end_time: str = "17:00"
    default_break_minutes: int = 30
    default_training_minutes: int = 0

    # background refresh
    scheduler_enabled: bool = False
    goal_sweep_seconds: int = 60
    finalize_hour: int = 0
    finalize_minute: int = 5

    log_level: str = "INFO"
    log_json: bool = False

    # load .env, ignore unknown keys so new vars don't break boot
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
