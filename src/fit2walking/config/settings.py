from typing import Optional, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings managed by Pydantic Settings.
    Reads from FIT2WALKING_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FIT2WALKING_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Map Document
    ZOOM: int = 12
    TIMEZONE: Optional[str] = None  # IANA name, None = system local time

    # Geodesic policy: raise instead of using the last iterate on non-convergence
    GEODESIC_STRICT: bool = False

    # Legend ranges used when no point in the track carries the attribute
    HEART_RATE_FALLBACK: Tuple[float, float] = (80.0, 160.0)
    SPEED_FALLBACK: Tuple[float, float] = (0.0, 10.0)
    CADENCE_FALLBACK: Tuple[float, float] = (0.0, 120.0)
    TEMPERATURE_FALLBACK: Tuple[float, float] = (-10.0, 45.0)
    # None keeps missing elevation fatal
    ELEVATION_FALLBACK: Optional[Tuple[float, float]] = None

    LOG_LEVEL: str = "INFO"


settings = Settings()
