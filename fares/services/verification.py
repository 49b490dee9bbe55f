import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal

from ..exceptions import InvalidInput, PriceMismatch
from .pricing import FareBreakdown, PricingConfig, PricingService, format_breakdown
from .vehicles import VehicleCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedBooking:
    fare: FareBreakdown
    breakdown: dict = field(default_factory=dict)
    verified: bool = True


class BookingVerificationService:
    """Recomputes a quote from server-held data and checks the client's total against it.

    The client's price is only ever compared, never used in the calculation.
    A difference above ``PricingConfig.mismatch_tolerance`` raises PriceMismatch.
    """

    @staticmethod
    def _client_price(value):
        if value is None:
            return None
        if isinstance(value, bool):
            raise InvalidInput("Invalid client calculated price")
        try:
            price = float(value)
        except (TypeError, ValueError):
            raise InvalidInput("Invalid client calculated price")
        if not math.isfinite(price):
            raise InvalidInput("Invalid client calculated price")
        return price

    @classmethod
    def verify(cls, vehicle_id: int, distance_km: float, trip_type: str, client_calculated_price: float = None,
               catalog: VehicleCatalog = None, config: PricingConfig = None) -> VerifiedBooking:
        config = config or PricingConfig.from_settings()
        client_price = cls._client_price(client_calculated_price)

        fare = PricingService.quote(vehicle_id, distance_km, trip_type, catalog=catalog, config=config)

        if client_price is not None:
            difference = abs(Decimal(str(client_price)) - Decimal(str(fare.total)))
            if difference > Decimal(str(config.mismatch_tolerance)):
                logger.warning('Price mismatch for vehicle %s (%s, %s km): server=%s client=%s',
                               vehicle_id, trip_type, distance_km, fare.total, client_price)
                raise PriceMismatch(
                    server_calculated_price=fare.total,
                    client_calculated_price=client_price,
                    difference=float(PricingService._round(difference)),
                )

        logger.info('Verified booking for vehicle %s (%s, %s km): total=%s', vehicle_id, trip_type, distance_km, fare.total)
        return VerifiedBooking(fare=fare, breakdown=format_breakdown(fare, config=config, include_driver_bata=True))
