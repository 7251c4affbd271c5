"""Runtime configuration for the altitude tracker service."""

from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from . import constants
from .sensors import validate_distance_filter


class Settings(BaseSettings):
    """Application settings loaded from ALTITUDE_TRACKER_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="ALTITUDE_TRACKER_")

    export_dir: Path = Field(
        default=constants.DEFAULT_EXPORT_DIR,
        description="Directory export files are written to",
    )
    distance_filter_m: float = Field(
        default=constants.DEFAULT_DISTANCE_FILTER_M,
        description="Minimum movement in meters before the position source reports a new fix",
    )
    barometer_available: bool = Field(
        default=True,
        description="Whether the device has a barometric altimeter",
    )
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("distance_filter_m")
    @classmethod
    def _check_distance_filter(cls, value: float) -> float:
        return validate_distance_filter(value)


settings = Settings()
