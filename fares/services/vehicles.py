from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from django.conf import settings

from ..exceptions import InvalidInput, NotFound

ONEWAY = "oneway"
ROUNDTRIP = "roundtrip"
TRIP_TYPES = (ONEWAY, ROUNDTRIP)


@dataclass(frozen=True)
class Vehicle:
    id: int
    name: str
    category: str
    oneway_rate_per_km: float
    roundtrip_rate_per_km: float
    description: str = ""
    passengers: int = 4

    def rate_for(self, trip_type: str) -> float:
        if trip_type == ONEWAY:
            return self.oneway_rate_per_km
        if trip_type == ROUNDTRIP:
            return self.roundtrip_rate_per_km
        raise InvalidInput("Invalid trip type")


class VehicleCatalog:
    """Read-only lookup of the vehicles we offer, keyed by id."""

    def __init__(self, vehicles: Iterable[Vehicle]):
        self._vehicles: Tuple[Vehicle, ...] = tuple(vehicles)
        self._by_id = {v.id: v for v in self._vehicles}

    @classmethod
    def from_settings(cls) -> "VehicleCatalog":
        return cls(Vehicle(**row) for row in settings.VEHICLES)

    def __iter__(self):
        return iter(self._vehicles)

    def __len__(self):
        return len(self._vehicles)

    def find(self, vehicle_id) -> Optional[Vehicle]:
        return self._by_id.get(vehicle_id)

    def get(self, vehicle_id) -> Vehicle:
        vehicle = self.find(vehicle_id)
        if vehicle is None:
            raise NotFound("Vehicle not found")
        return vehicle
