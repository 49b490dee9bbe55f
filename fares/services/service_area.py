from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Optional

from django.conf import settings
from django.utils.dateparse import parse_datetime

from .vehicles import ROUNDTRIP


@dataclass(frozen=True)
class Location:
    display_name: str
    lat: float
    lon: float
    address: Mapping[str, str] = field(default_factory=dict)
    place_id: str = ""
    type: str = ""

    @property
    def state(self) -> Optional[str]:
        return (self.address or {}).get("state") or None


@dataclass(frozen=True)
class LocationValidation:
    ok: bool
    message: Optional[str] = None
    invalid_location: Optional[str] = None


def _normalize(state: str) -> str:
    return state.strip().lower()


def allowed_states() -> list:
    return list(settings.SERVICE_AREA_STATES)


def is_state_allowed(state: Optional[str], allowed: Iterable[str] = None) -> bool:
    if not state or not state.strip():
        return False
    allowed = allowed if allowed is not None else allowed_states()
    return _normalize(state) in {_normalize(s) for s in allowed}


def _area_label(allowed) -> str:
    names = list(allowed)
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])} and {names[-1]}"


def validate_locations(pickup: Optional[Location], dropoff: Optional[Location], allowed: Iterable[str] = None) -> LocationValidation:
    """Check that both ends of the trip fall inside the service area.

    Matching is on the resolved state only; locations must already be geocoded.
    """
    if pickup is None or dropoff is None:
        return LocationValidation(ok=False, message="Please select both pickup and dropoff locations.")

    allowed = list(allowed) if allowed is not None else allowed_states()
    pickup_state = pickup.state
    dropoff_state = dropoff.state
    pickup_ok = is_state_allowed(pickup_state, allowed)
    dropoff_ok = is_state_allowed(dropoff_state, allowed)

    prefix = f"Service is only available in {_area_label(allowed)}."
    if not pickup_ok and not dropoff_ok:
        return LocationValidation(
            ok=False,
            message=f"{prefix} Both your pickup ({pickup_state or 'Unknown'}) and dropoff ({dropoff_state or 'Unknown'}) locations are outside our service area.",
            invalid_location="both",
        )
    if not pickup_ok:
        return LocationValidation(
            ok=False,
            message=f"{prefix} Your pickup location ({pickup_state or 'Unknown'}) is outside our service area.",
            invalid_location="pickup",
        )
    if not dropoff_ok:
        return LocationValidation(
            ok=False,
            message=f"{prefix} Your dropoff location ({dropoff_state or 'Unknown'}) is outside our service area.",
            invalid_location="dropoff",
        )
    return LocationValidation(ok=True)


def _parse(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return parse_datetime(str(value))
    except ValueError:
        return None


def validate_trip(trip_type: str, pickup: Optional[Location], dropoff: Optional[Location], pickup_at, return_at=None) -> LocationValidation:
    """Completeness checks for a trip before it is priced."""
    if pickup is None:
        return LocationValidation(ok=False, message="Please select a pickup location.")
    if dropoff is None:
        return LocationValidation(ok=False, message="Please select a dropoff location.")
    if not pickup_at:
        return LocationValidation(ok=False, message="Please select pickup date & time.")

    pickup_dt = _parse(pickup_at)
    if pickup_dt is None:
        return LocationValidation(ok=False, message="Invalid pickup date/time.")

    if trip_type == ROUNDTRIP:
        if not return_at:
            return LocationValidation(ok=False, message="Please select return date & time.")
        return_dt = _parse(return_at)
        if return_dt is None:
            return LocationValidation(ok=False, message="Invalid return date/time.")
        # naive and aware values can't be compared
        if (pickup_dt.tzinfo is None) != (return_dt.tzinfo is None):
            return LocationValidation(ok=False, message="Invalid return date/time.")
        if return_dt <= pickup_dt:
            return LocationValidation(ok=False, message="Return time must be after pickup time.")

    return LocationValidation(ok=True)
