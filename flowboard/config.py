from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "FB_", "env_file": ".env", "env_file_encoding": "utf-8"}

    jwt_secret: str = Field(min_length=32)
    jwt_expire_minutes: int = Field(default=15)
    refresh_expire_days: int = Field(default=7)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    budget_alert_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    log_level: str = Field(default="INFO")
    db_path: str = Field(default="flowboard.db")
    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
