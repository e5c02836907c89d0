from typing import Dict, List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    # Environment Configuration
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Project Information
    PROJECT_NAME: str = "GutHealth Backend"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    # Server
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Database
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./data/guthealth.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Security
    SECRET_KEY: str = "change-this-secret-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # Timezone configuration (used to resolve "today" for users)
    DEFAULT_TIMEZONE: str = "Asia/Shanghai"

    # Health level cut points, checked from the highest threshold down.
    # A score below every threshold is "bad".
    HEALTH_LEVEL_THRESHOLDS: Dict[str, int] = {
        "excellent": 90,
        "good": 75,
        "fair": 60,
        "poor": 40,
    }

    # Advice looks back this many days (inclusive of today)
    ADVICE_LOOKBACK_DAYS: int = 7

    # Notifications
    NOTIFICATION_PAGE_SIZE: int = 20
    NOTIFICATION_INACTIVITY_DAYS: int = 3

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Metrics / logging
    METRICS_ENABLED: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Validators & Derived Settings ---
    @field_validator("SQLALCHEMY_DATABASE_URI", mode="before")
    @classmethod
    def normalize_postgres_scheme(cls, v: Optional[str]) -> str:
        # SQLAlchemy no longer accepts the postgres:// alias
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator("HEALTH_LEVEL_THRESHOLDS")
    @classmethod
    def check_thresholds(cls, v: Dict[str, int]) -> Dict[str, int]:
        unknown = set(v) - {"excellent", "good", "fair", "poor"}
        if unknown:
            raise ValueError(f"Unknown health levels in thresholds: {sorted(unknown)}")
        for level, cut in v.items():
            if not 0 <= cut <= 100:
                raise ValueError(f"Threshold for {level} must be within 0..100")
        return v

    @model_validator(mode="after")
    def validate_environment_config(self) -> "Settings":
        """Validate environment-specific configuration requirements"""
        if self.is_production and self.SECRET_KEY == "change-this-secret-key":
            raise ValueError("SECRET_KEY must be set in production")
        if self.ADVICE_LOOKBACK_DAYS < 1:
            raise ValueError("ADVICE_LOOKBACK_DAYS must be at least 1")
        return self

    # Environment-specific properties
    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    @property
    def is_sqlite(self) -> bool:
        return self.SQLALCHEMY_DATABASE_URI.startswith("sqlite")

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra='ignore')


settings = Settings()
