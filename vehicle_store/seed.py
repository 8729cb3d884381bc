"""
Synthetic vehicle data.

Generates plausible vehicles with random inspection notes, standing in for
the remote catalogue until a real transport is wired up.
"""

import random
from collections.abc import Callable, Iterator
from datetime import date, datetime

from .models import FuelLevel, InspectionNote, Vehicle, VehiclePart

MAKES = (
    "Toyota", "Honda", "Mercedes", "Tesla", "BMW", "Kia", "Opel", "Mitsubishi",
    "Subaru", "Mazda", "Skoda", "Volkswagen", "Audi", "Chrysler", "Daewoo",
    "Peugeot", "Renault", "Seat", "Volvo", "Land Rover", "Porsche",
)
MODELS = (
    "Sprint", "Fury", "Explorer", "Discovery", "305", "920", "Brightside", "XS",
    "Traveller", "Wanderer", "Pace", "Espresso", "Expert", "Jupiter", "Neptune",
    "Prowler",
)

ADJECTIVES = ("Light", "Heavy", "Deep", "Long", "Short", "Substantial", "Slight", "Severe", "Problematic")
DAMAGES = ("Scratch", "Dent", "Ding", "Break", "Discoloration")
RELATIONS = ("towards", "behind", "near", "beside", "along")
POSITIONS = ("Edge", "Side", "Top", "Back", "Front", "Inside", "Outside")

LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class SeedDataGenerator:
    """Produces random vehicles. Pass a seeded ``random.Random`` for repeatable output."""

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.rng = rng or random.Random()
        self.clock = clock

    def license_number(self) -> str:
        """Three digits, a dash and three capital letters, e.g. ``042-KQZ``."""
        digits = "".join(str(self.rng.randrange(10)) for _ in range(3))
        letters = "".join(self.rng.choice(LETTERS) for _ in range(3))
        return f"{digits}-{letters}"

    def note_text(self) -> str:
        adjective = self.rng.choice(ADJECTIVES)
        damage = self.rng.choice(DAMAGES).lower()
        position = self.rng.choice(POSITIONS)
        return self.rng.choice([
            f"{adjective} {damage}",
            f"{adjective} {damage} {self.rng.choice(RELATIONS)} {position.lower()}",
            f"{position} has {damage}",
            f"{position} has {adjective.lower()} {damage}",
        ])

    def vehicle(self) -> Vehicle:
        rng = self.rng
        return Vehicle(
            license_number=self.license_number(),
            make=rng.choice(MAKES),
            model=rng.choice(MODELS),
            registration_date=date(rng.randrange(2016, 2021), rng.randrange(1, 13), rng.randrange(1, 29)),
            last_updated=self.clock(),
            mileage=rng.randrange(500, 50000),
            tank=rng.choice(list(FuelLevel)),
            notes=[
                InspectionNote(location=rng.choice(list(VehiclePart)), text=self.note_text())
                for _ in range(rng.randrange(0, 5))
            ],
        )

    def vehicles(self, count: int) -> Iterator[Vehicle]:
        for _ in range(count):
            yield self.vehicle()
