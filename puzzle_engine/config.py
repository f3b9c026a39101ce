"""Settings for piece generation and board interaction."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Puzzle engine settings configuration.

    Every field can be overridden through an environment variable with the
    ``PUZZLE_`` prefix, e.g. ``PUZZLE_SNAP_THRESHOLD_RATIO=0.3``.
    """

    # Piece geometry
    TAB_SIZE_RATIO: float = 0.18  # Tab margin relative to the smaller cell side
    POINTS_PER_CURVE: int = 20

    # Board interaction
    SNAP_THRESHOLD_RATIO: float = 0.35  # Fraction of one grid cell
    COMPLETION_TOLERANCE: float = 1.0  # Pixels
    SHUFFLE_MARGIN: float = 20.0
    SCATTER_AREA_SCALE: float = 1.5

    # Piece extraction
    ANTIALIAS_SCALE: int = 4
    OUTLINE_STROKE_WIDTH: int = 2
    OUTLINE_ALPHA: int = 80
    EXTRACTION_WORKERS: int = 1

    LOG_LEVEL: str = "INFO"

    class Config:
        """Pydantic configuration class."""

        case_sensitive = True
        env_prefix = "PUZZLE_"
        env_file = ".env"
        extra = "ignore"

    @field_validator("TAB_SIZE_RATIO", "SNAP_THRESHOLD_RATIO")
    @classmethod
    def validate_ratio(cls, v: float) -> float:
        """Ratios are fractions of a grid cell."""
        if not 0.0 < v < 1.0:
            raise ValueError(f"ratio must be between 0 and 1, got {v}")
        return v

    @field_validator("COMPLETION_TOLERANCE", "SCATTER_AREA_SCALE")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Tolerance and scale must be positive."""
        if v <= 0:
            raise ValueError(f"value must be positive, got {v}")
        return v

    @field_validator("POINTS_PER_CURVE", "ANTIALIAS_SCALE", "EXTRACTION_WORKERS")
    @classmethod
    def validate_at_least_one(cls, v: int) -> int:
        """Counts must be at least one."""
        if v < 1:
            raise ValueError(f"value must be at least 1, got {v}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
