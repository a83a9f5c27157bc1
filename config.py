from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    database_url: str = Field("sqlite:///./collections.db", alias="DATABASE_URL")
    shop_url: str = Field("", alias="SHOP_URL")
    shop_token: str = Field("", alias="SHOP_TOKEN")
    shopify_api_version: str = Field("2025-10", alias="SHOPIFY_API_VERSION")
    shopify_timeout: float = Field(30.0, alias="SHOPIFY_TIMEOUT")
    jwt_secret_key: str = Field("change-me-to-a-long-random-secret", alias="JWT_SECRET_KEY")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)


settings = Settings()
