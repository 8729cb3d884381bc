"""Tests for the vehicle data model."""

from datetime import date, datetime, timedelta, timezone

import pytest

from vehicle_store.models import (
    FuelLevel,
    InspectionNote,
    Vehicle,
    VehiclePart,
    normalize_license_number,
)


class TestVehicle:
    """Tests for Vehicle serialization and keys."""

    def test_to_dict(self, make_vehicle) -> None:
        vehicle = make_vehicle("123-ABC", last_updated=datetime(2024, 1, 2, 3, 4, 5))

        data = vehicle.to_dict()

        assert data["license_number"] == "123-ABC"
        assert data["registration_date"] == "2018-05-17"
        assert data["last_updated"] == "2024-01-02T03:04:05"
        assert data["tank"] == "half"
        assert data["notes"] == [{"location": "hood", "text": "Light scratch"}]

    def test_from_dict_keeps_timezone(self) -> None:
        stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=-5)))
        vehicle = Vehicle.from_dict({
            "license_number": "900-QQQ",
            "make": "Audi",
            "model": "Pace",
            "registration_date": "2019-09-09",
            "last_updated": stamp.isoformat(),
            "mileage": "1200",
            "tank": "three_quarters",
            "notes": [{"location": "wheel_rear_left", "text": "Deep dent"}],
        })

        assert vehicle.last_updated == stamp
        assert vehicle.mileage == 1200
        assert vehicle.tank is FuelLevel.THREE_QUARTERS
        assert vehicle.notes == [InspectionNote(VehiclePart.WHEEL_REAR_LEFT, "Deep dent")]

    def test_from_dict_defaults(self) -> None:
        vehicle = Vehicle.from_dict({
            "license_number": "900-QQQ",
            "make": "Audi",
            "model": "Pace",
            "registration_date": "2019-09-09",
            "last_updated": "2024-01-01T00:00:00",
            "mileage": 1,
        })

        assert vehicle.tank is FuelLevel.EMPTY
        assert vehicle.notes == []

    def test_unknown_enum_value_rejected(self) -> None:
        with pytest.raises(ValueError):
            InspectionNote.from_dict({"location": "spoiler", "text": "x"})

    def test_key_is_case_insensitive(self) -> None:
        upper = Vehicle("123-ABC", "Kia", "XS", date(2020, 1, 1), datetime(2024, 1, 1), 10)
        lower = Vehicle("123-abc", "Kia", "XS", date(2020, 1, 1), datetime(2024, 1, 1), 10)

        assert upper.key == lower.key == normalize_license_number("123-Abc")
