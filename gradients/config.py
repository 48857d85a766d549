from dataclasses import dataclass

from .errors import ConfigurationError

# ---------------- Defaults ----------------

TOLERANCE = 0.05        # grading allowance on each partial
POINT_RANGE = (-3, 3)   # integer question points, both axes
HALF_RANGE = 5.0        # surface window around the point
STEP = 0.3              # surface sample spacing
ARROW_LENGTH = 0.3      # drawn gradient arrow length


@dataclass(frozen=True)
class TrainerConfig:
    tolerance: float = TOLERANCE
    point_low: int = POINT_RANGE[0]
    point_high: int = POINT_RANGE[1]
    half_range: float = HALF_RANGE
    step: float = STEP
    arrow_length: float = ARROW_LENGTH

    def __post_init__(self):
        if self.tolerance <= 0:
            raise ConfigurationError(f"tolerance must be positive, got {self.tolerance}")
        if self.step <= 0:
            raise ConfigurationError(f"step must be positive, got {self.step}")
        if self.arrow_length <= 0:
            raise ConfigurationError(f"arrow_length must be positive, got {self.arrow_length}")
        if self.half_range < 0:
            raise ConfigurationError(f"half_range must not be negative, got {self.half_range}")
        if self.point_low > self.point_high:
            raise ConfigurationError(
                f"empty point range [{self.point_low}, {self.point_high}]")
