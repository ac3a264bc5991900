from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ECLIPSE_", env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./eclipse.db"
    log_level: str = "INFO"

    # Standard game length
    max_rounds: int = 9
    max_influence: int = 16

    base_income_money: int = 2
    base_income_science: int = 1
    base_income_materials: int = 1

    # Optimistic-concurrency retries per submitted action
    max_commit_retries: int = 3


settings = Settings()
