from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    port: int = Field(3000, description="Port bound by the HTTP server")
    host: str = Field("0.0.0.0", description="Address bound by the HTTP server")
    database_url: str = Field("sqlite:///loja.db", description="SQLAlchemy database URL")
    upload_dir: str = Field("uploads", description="Directory for uploaded product images")
    api_title: str = Field("Mix Modas API")
    bcrypt_rounds: int = Field(10, ge=4, le=31)
    seed_sample_product: bool = Field(True)
    log_level: str = Field("INFO")


settings = Settings()
