from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.matching.scoring import ScoringPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./lost_and_found.db"

    # Auth (token decoding only, tokens are issued elsewhere)
    JWT_SECRET: str = "your_really_long_secret_key"
    JWT_ALGORITHM: str = "HS256"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Matching engine
    MATCH_WORKERS: int = 2
    MATCH_THRESHOLD: float = 80.0
    TEMPORAL_FULL_HOURS: float = 24.0
    TEMPORAL_HALF_HOURS: float = 48.0
    SPATIAL_FULL_METERS: float = 500.0
    SPATIAL_HALF_METERS: float = 1500.0

    # Claims
    AUTO_REJECT_SIBLING_CLAIMS: bool = False

    def scoring_policy(self) -> ScoringPolicy:
        return ScoringPolicy(
            threshold=self.MATCH_THRESHOLD,
            temporal_full_hours=self.TEMPORAL_FULL_HOURS,
            temporal_half_hours=self.TEMPORAL_HALF_HOURS,
            spatial_full_meters=self.SPATIAL_FULL_METERS,
            spatial_half_meters=self.SPATIAL_HALF_METERS,
        )
