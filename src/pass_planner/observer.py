"""
Ground observer definitions.

An observer is the place on Earth a pass is predicted for. Coordinates are
validated here, at construction; the pass scanner trusts what it is given.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union
import json
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Observer:
    """
    Represents a ground observer for pass prediction.

    Immutable so it can be shared between scans and worker processes.
    """

    latitude: float  # degrees, -90 to +90
    longitude: float  # degrees, -180 to +180
    height_km: float = 0.0  # height above the ellipsoid
    name: str = ""

    def __post_init__(self) -> None:
        """Validate observer coordinates."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Invalid latitude: {self.latitude}. Must be between -90 and 90 degrees.")

        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Invalid longitude: {self.longitude}. Must be between -180 and 180 degrees.")

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"{self.latitude:.4f}, {self.longitude:.4f}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert observer to dictionary representation."""
        return {
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "height_km": self.height_km,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Observer":
        """Create Observer from dictionary."""
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            height_km=float(data.get("height_km", 0.0)),
            name=data.get("name", ""),
        )

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} ({self.latitude:.4f}°, {self.longitude:.4f}°)"
        return f"({self.latitude:.4f}°, {self.longitude:.4f}°)"


def save_observers(observers: List[Observer], file_path: Union[str, Path]) -> None:
    """
    Save observers to a JSON file.

    Args:
        observers: Observers to save
        file_path: Path to save file
    """
    data = [observer.to_dict() for observer in observers]
    with open(file_path, 'w') as f:
        json.dump({"observers": data, "count": len(data)}, f, indent=2)

    logger.info(f"Saved {len(observers)} observers to {file_path}")


def load_observers(file_path: Union[str, Path]) -> List[Observer]:
    """
    Load observers from a JSON file written by ``save_observers``.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If an entry has invalid coordinates
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Observer file not found: {file_path}")

    try:
        with open(path, 'r') as f:
            data = json.load(f)

        observers = [Observer.from_dict(entry) for entry in data.get("observers", [])]
    except Exception as e:
        logger.error(f"Error loading observers from {file_path}: {e}")
        raise

    logger.info(f"Loaded {len(observers)} observers from {file_path}")
    return observers
