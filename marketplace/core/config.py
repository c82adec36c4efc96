from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./marketplace.db"
    service_name: str = "marketplace-orders"
    log_level: str = "INFO"
    cors_origins: str = "*"
    db_pool_size: int = 20
    db_max_overflow: int = 10
    order_number_prefix: str = "ORD"
    admin_order_list_limit: int = 100

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v.startswith(("postgresql", "sqlite")):
            raise ValueError("Only PostgreSQL and SQLite are supported")
        return v

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")


settings = Settings()
