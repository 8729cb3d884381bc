"""
Vehicle data model.

Defines the records cached on-device: vehicles, their fuel level and the
inspection notes attached to individual body parts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class FuelLevel(Enum):
    """Fuel tank level recorded at inspection."""

    EMPTY = "empty"
    QUARTER = "quarter"
    HALF = "half"
    THREE_QUARTERS = "three_quarters"
    FULL = "full"


class VehiclePart(Enum):
    """Body part an inspection note refers to."""

    BUMPER_FRONT_LEFT = "bumper_front_left"
    BUMPER_FRONT_MIDDLE = "bumper_front_middle"
    BUMPER_FRONT_RIGHT = "bumper_front_right"
    BUMPER_REAR_LEFT = "bumper_rear_left"
    BUMPER_REAR_MIDDLE = "bumper_rear_middle"
    BUMPER_REAR_RIGHT = "bumper_rear_right"
    DOOR_FRONT_LEFT = "door_front_left"
    DOOR_FRONT_RIGHT = "door_front_right"
    DOOR_REAR_LEFT = "door_rear_left"
    DOOR_REAR_RIGHT = "door_rear_right"
    FENDER_FRONT_LEFT = "fender_front_left"
    FENDER_FRONT_RIGHT = "fender_front_right"
    FENDER_REAR_LEFT = "fender_rear_left"
    FENDER_REAR_RIGHT = "fender_rear_right"
    HOOD = "hood"
    ROOF = "roof"
    TRUNK = "trunk"
    WINDSHIELD = "windshield"
    REAR_WINDOW = "rear_window"
    WHEEL_FRONT_LEFT = "wheel_front_left"
    WHEEL_FRONT_RIGHT = "wheel_front_right"
    WHEEL_REAR_LEFT = "wheel_rear_left"
    WHEEL_REAR_RIGHT = "wheel_rear_right"


def normalize_license_number(license_number: str) -> str:
    """Key used for case-insensitive license number comparison."""
    return license_number.casefold()


@dataclass
class InspectionNote:
    """A free-form note attached to one part of the vehicle."""

    location: VehiclePart
    text: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"location": self.location.value, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InspectionNote:
        """Deserialize from dictionary."""
        return cls(location=VehiclePart(data["location"]), text=data["text"])


@dataclass
class Vehicle:
    """A vehicle record as cached in either the baseline or local-edits collection.

    The license number is the business key. Two records describe the same
    vehicle when their license numbers match case-insensitively.
    """

    license_number: str
    make: str
    model: str
    registration_date: date
    last_updated: datetime
    mileage: int
    tank: FuelLevel = FuelLevel.EMPTY
    notes: list[InspectionNote] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Case-insensitive storage key for this vehicle."""
        return normalize_license_number(self.license_number)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "license_number": self.license_number,
            "make": self.make,
            "model": self.model,
            "registration_date": self.registration_date.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "mileage": self.mileage,
            "tank": self.tank.value,
            "notes": [note.to_dict() for note in self.notes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Vehicle:
        """Deserialize from dictionary."""
        return cls(
            license_number=data["license_number"],
            make=data["make"],
            model=data["model"],
            registration_date=date.fromisoformat(data["registration_date"]),
            last_updated=datetime.fromisoformat(data["last_updated"]),
            mileage=int(data["mileage"]),
            tank=FuelLevel(data.get("tank", FuelLevel.EMPTY.value)),
            notes=[InspectionNote.from_dict(n) for n in data.get("notes", [])],
        )
