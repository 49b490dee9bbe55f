import logging
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from django.conf import settings

from ..exceptions import InvalidInput
from .vehicles import ONEWAY, ROUNDTRIP, TRIP_TYPES, Vehicle, VehicleCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TripPricing:
    threshold: float
    extra_km_rate: float


@dataclass(frozen=True)
class PricingConfig:
    oneway: TripPricing
    roundtrip: TripPricing
    driver_bata: float
    mismatch_tolerance: float = 1.0
    currency_symbol: str = "₹"

    @classmethod
    def from_settings(cls) -> "PricingConfig":
        cfg = settings.PRICING
        return cls(
            oneway=TripPricing(**cfg["ONEWAY"]),
            roundtrip=TripPricing(**cfg["ROUNDTRIP"]),
            driver_bata=cfg["DRIVER_BATA"],
            mismatch_tolerance=cfg.get("MISMATCH_TOLERANCE", 1.0),
            currency_symbol=cfg.get("CURRENCY_SYMBOL", "₹"),
        )

    def for_trip(self, trip_type: str) -> TripPricing:
        if trip_type == ONEWAY:
            return self.oneway
        if trip_type == ROUNDTRIP:
            return self.roundtrip
        raise InvalidInput("Invalid trip type")


@dataclass(frozen=True)
class FareBreakdown:
    trip_type: str
    base_fare: float
    base_km: float
    extra_km: float
    extra_fee: float
    driver_bata: float
    total: float
    actual_distance: float
    chargeable_distance: float
    threshold: float
    rate_per_km: float
    extra_km_rate: float
    vehicle: Optional[Vehicle] = None


def _dec(value) -> Decimal:
    return Decimal(str(value))


class PricingService:
    """PricingService calculates the fare for a vehicle and trip.

    Rules summary:
    - Round trips are priced on twice the entered one-way distance.
    - Each trip type has a threshold (km included in the base fare). The base
      fare is always threshold * vehicle rate, even for shorter trips.
    - Every km beyond the threshold costs the trip type's extra-km rate.
    - A flat driver allowance (bata) is added to every trip.
    """

    @staticmethod
    def _round(value: Decimal) -> Decimal:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @staticmethod
    def _validate(distance_km, trip_type: str) -> Decimal:
        if trip_type not in TRIP_TYPES:
            raise InvalidInput("Invalid trip type")
        if distance_km is None or isinstance(distance_km, bool):
            raise InvalidInput("Invalid distance")
        try:
            distance = float(distance_km)
        except (TypeError, ValueError):
            raise InvalidInput("Invalid distance")
        if not math.isfinite(distance) or distance <= 0:
            raise InvalidInput("Invalid distance")
        return _dec(distance)

    @classmethod
    def calculate(cls, vehicle: Vehicle, distance_km: float, trip_type: str, config: PricingConfig = None) -> FareBreakdown:
        config = config or PricingConfig.from_settings()
        distance = cls._validate(distance_km, trip_type)

        trip = config.for_trip(trip_type)
        threshold = _dec(trip.threshold)
        extra_rate = _dec(trip.extra_km_rate)
        rate = _dec(vehicle.rate_for(trip_type))
        driver_bata = _dec(config.driver_bata)

        actual_distance = distance * 2 if trip_type == ROUNDTRIP else distance
        # Minimum billable distance is the threshold
        chargeable_distance = max(actual_distance, threshold)

        base_fare = cls._round(threshold * rate)
        extra_km = max(Decimal("0"), actual_distance - threshold)
        extra_fee = cls._round(extra_km * extra_rate)
        total = cls._round(base_fare + extra_fee + driver_bata)

        return FareBreakdown(
            trip_type=trip_type,
            base_fare=float(base_fare),
            base_km=float(cls._round(threshold)),
            extra_km=float(cls._round(extra_km)),
            extra_fee=float(extra_fee),
            driver_bata=float(cls._round(driver_bata)),
            total=float(total),
            actual_distance=float(cls._round(actual_distance)),
            chargeable_distance=float(cls._round(chargeable_distance)),
            threshold=float(threshold),
            rate_per_km=float(rate),
            extra_km_rate=float(extra_rate),
            vehicle=vehicle,
        )

    @classmethod
    def quote(cls, vehicle_id: int, distance_km: float, trip_type: str, catalog: VehicleCatalog = None, config: PricingConfig = None) -> FareBreakdown:
        catalog = catalog or VehicleCatalog.from_settings()
        vehicle = catalog.get(vehicle_id)
        fare = cls.calculate(vehicle, distance_km, trip_type, config=config)
        logger.debug('Quoted %s %s km %s: total=%s', vehicle.name, distance_km, trip_type, fare.total)
        return fare

    @classmethod
    def estimate_for_catalog(cls, distance_km: float, trip_type: str, catalog: VehicleCatalog = None, config: PricingConfig = None) -> List[FareBreakdown]:
        """One fare per vehicle, used for the vehicle picker."""
        catalog = catalog or VehicleCatalog.from_settings()
        config = config or PricingConfig.from_settings()
        return [cls.calculate(v, distance_km, trip_type, config=config) for v in catalog]


def format_amount(value) -> str:
    """Render an amount without trailing zeros: 1820.0 -> '1820', 12.5 -> '12.5'."""
    text = format(_dec(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def format_breakdown(fare: FareBreakdown, config: PricingConfig = None, include_driver_bata: bool = False) -> dict:
    config = config or PricingConfig.from_settings()
    cur = config.currency_symbol
    lines = {
        "baseCharge": f"{format_amount(fare.threshold)}km × {cur}{format_amount(fare.rate_per_km)}/km = {cur}{format_amount(fare.base_fare)}",
    }
    if fare.extra_km > 0:
        lines["extraCharge"] = f"{format_amount(fare.extra_km)}km × {cur}{format_amount(fare.extra_km_rate)}/km = {cur}{format_amount(fare.extra_fee)}"
    else:
        lines["extraCharge"] = "No extra charge"
    if include_driver_bata:
        lines["driverBata"] = f"Driver allowance = {cur}{format_amount(fare.driver_bata)}"
    lines["total"] = f"{cur}{format_amount(fare.total)}"
    return lines
