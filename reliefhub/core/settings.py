"""
Core settings and environment variables for ReliefHub.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "ReliefHub"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Relief point search radii (meters)
    DEFAULT_RADIUS_METERS: float = Field(5000.0, gt=0)
    MAX_SEARCH_RADIUS_METERS: float = Field(40000.0, gt=0)  # Hard cap for radius doubling
    MAX_RELEVANT_DISTANCE_METERS: float = Field(20000.0, gt=0)  # distanceDecay reaches 0 here

    # Recommendation scoring
    RECENCY_WINDOW_HOURS: float = 24.0
    FEEDBACK_STEP: float = 0.05
    FEEDBACK_WEIGHT_MIN: float = 0.5
    FEEDBACK_WEIGHT_MAX: float = 1.5
    MAX_RECOMMENDATIONS: int = 10

    # Location source
    LOCATION_TIMEOUT_SECONDS: float = 5.0

    # Emergency number attached to SOS call actions
    EMERGENCY_PHONE: str = "112"

    # Push a relief-update notification whenever a relief point is added
    NOTIFY_ON_NEW_RELIEF_POINTS: bool = True

    # Load db_seed.json into the stores at startup
    SEED_DEMO_DATA: bool = False
    SEED_FILE_PATH: str = "./db_seed.json"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @model_validator(mode="after")
    def check_search_radii(self):
        if self.MAX_SEARCH_RADIUS_METERS < self.DEFAULT_RADIUS_METERS:
            raise ValueError("MAX_SEARCH_RADIUS_METERS must be >= DEFAULT_RADIUS_METERS")
        return self

    @property
    def cors_origins_list(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
