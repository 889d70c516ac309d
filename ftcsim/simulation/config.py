"""
Simulation configuration.

Tuning constants for driving, intake, shooting and the tick loop.
A few host-facing settings can be overridden via environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from .core.field import DriveMode


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_drive_mode() -> DriveMode:
    raw = os.getenv("FTCSIM_DRIVE_MODE", "field").lower()
    try:
        return DriveMode(raw)
    except ValueError:
        return DriveMode.FIELD


def _env_seed() -> Optional[int]:
    raw = os.getenv("FTCSIM_SEED")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass
class SimulationConfig:
    """Configuration for a simulated match."""

    # Drivetrain
    max_speed: float = 76.5          # inches/s
    max_rot_speed: float = 5.5       # rad/s
    linear_gains: tuple[float, float, float] = (10.0, 0.0, 0.5)
    heading_gains: tuple[float, float, float] = (12.0, 0.0, 0.6)
    drive_mode: DriveMode = field(default_factory=lambda: _env_drive_mode())

    # Field interaction
    basket_avoidance: bool = True
    capture_radius: float = 8.0      # inches

    # Action cooldowns (seconds), shared by every robot
    intake_cooldown: float = 0.25
    shot_cooldown: float = 0.35
    shot_result_ttl: float = 1.0
    points_per_score: int = 3

    # Odometry drift (per second since match start or last relocalize)
    drift_enabled: bool = True
    drift_rate_x: float = -0.07      # inches/s
    drift_rate_y: float = 0.09       # inches/s
    drift_rate_heading: float = 0.0015  # rad/s

    # Tick loop
    max_dt: float = field(default_factory=lambda: _env_float("FTCSIM_MAX_DT", 0.05))
    tick_rate_ms: int = field(
        default_factory=lambda: int(_env_float("FTCSIM_TICK_RATE_MS", 16))
    )
    seed: Optional[int] = field(default_factory=_env_seed)

    @classmethod
    def from_env(cls) -> "SimulationConfig":
        """Create config from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.max_speed <= 0:
            errors.append("max_speed must be positive")
        if self.max_rot_speed <= 0:
            errors.append("max_rot_speed must be positive")
        if not 0 < self.max_dt <= 0.25:
            errors.append("max_dt must be in (0, 0.25]")
        if self.tick_rate_ms <= 0:
            errors.append("tick_rate_ms must be positive")
        if self.capture_radius <= 0:
            errors.append("capture_radius must be positive")
        if self.intake_cooldown < 0 or self.shot_cooldown < 0:
            errors.append("cooldowns cannot be negative")
        return errors


# Singleton config instance
_config: Optional[SimulationConfig] = None


def get_config() -> SimulationConfig:
    """Get the global simulation configuration."""
    global _config
    if _config is None:
        _config = SimulationConfig.from_env()
    return _config


def set_config(config: SimulationConfig) -> None:
    """Replace the global configuration (useful for tests)."""
    global _config
    _config = config
