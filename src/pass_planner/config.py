"""
Scan configuration for pass prediction.

This module holds the tunable parameters of the pass scanner:
- Scan window and step size
- Darkness threshold for naked-eye visibility
- Earth shadow radius for the illumination test
"""

from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union
import logging

import yaml  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

# Defaults
DEFAULT_WINDOW_HOURS = 72.0
DEFAULT_STEP_SECONDS = 20.0
CIVIL_TWILIGHT_DEG = -6.0
EARTH_RADIUS_KM = 6371.0


class ScanPreset(Enum):
    """Named scan resolutions."""
    STANDARD = "standard"  # 72 h at 20 s
    QUICK = "quick"  # 24 h at 60 s
    FINE = "fine"  # 72 h at 5 s


@dataclass(frozen=True)
class ScanConfig:
    """
    Pass scanner configuration.

    The defaults reproduce the consumer-facing prediction: a 72 hour window
    sampled every 20 seconds, dark sky below civil twilight.
    """
    window_hours: float = DEFAULT_WINDOW_HOURS
    step_seconds: float = DEFAULT_STEP_SECONDS
    twilight_sun_altitude_deg: float = CIVIL_TWILIGHT_DEG
    earth_shadow_radius_km: float = EARTH_RADIUS_KM

    def __post_init__(self):
        """Validate scan configuration."""
        if self.step_seconds <= 0:
            raise ValueError(
                f"step_seconds must be > 0, got {self.step_seconds}"
            )

        if self.window_hours < 0:
            raise ValueError(
                f"window_hours must be >= 0, got {self.window_hours}"
            )

        if not -90 <= self.twilight_sun_altitude_deg <= 0:
            raise ValueError(
                f"twilight_sun_altitude_deg must be in [-90, 0], got {self.twilight_sun_altitude_deg}"
            )

        if self.earth_shadow_radius_km <= 0:
            raise ValueError(
                f"earth_shadow_radius_km must be > 0, got {self.earth_shadow_radius_km}"
            )

    @property
    def window_seconds(self) -> float:
        return self.window_hours * 3600.0

    def to_dict(self) -> Dict[str, float]:
        """Return configuration as dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown scan config keys: {unknown}")
        return cls(**{k: float(v) for k, v in data.items() if k in known})


DEFAULT_SCAN_CONFIG = ScanConfig()

_PRESETS: Dict[ScanPreset, ScanConfig] = {
    ScanPreset.STANDARD: DEFAULT_SCAN_CONFIG,
    ScanPreset.QUICK: ScanConfig(window_hours=24.0, step_seconds=60.0),
    ScanPreset.FINE: ScanConfig(window_hours=72.0, step_seconds=5.0),
}


def create_scan_config(preset: Union[str, ScanPreset] = ScanPreset.STANDARD) -> ScanConfig:
    """
    Create a scan configuration from a named preset.

    Args:
        preset: "standard", "quick" or "fine"

    Returns:
        ScanConfig for the preset
    """
    if preset is None:
        preset = ScanPreset.STANDARD

    if isinstance(preset, str):
        try:
            preset = ScanPreset(preset.lower())
        except ValueError:
            valid = [p.value for p in ScanPreset]
            raise ValueError(f"Unknown preset: {preset}. Use one of {valid}")

    return _PRESETS[preset]


def load_scan_config(config_file: Union[str, Path]) -> ScanConfig:
    """
    Load scan configuration from a YAML file.

    The file may either hold the fields at top level or under a ``scan`` key.
    A ``preset`` key selects the base configuration that the other keys
    override.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file content is not a mapping or values are invalid
    """
    config_path = Path(config_file)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_file} must contain a mapping")

    data = data.get("scan", data)
    if not isinstance(data, dict):
        raise ValueError(f"'scan' section in {config_file} must be a mapping")

    data = dict(data)
    base = create_scan_config(data.pop("preset", ScanPreset.STANDARD))
    merged = base.to_dict()
    merged.update(data)

    config = ScanConfig.from_dict(merged)
    logger.info(f"Loaded scan configuration from {config_path}")
    return config
