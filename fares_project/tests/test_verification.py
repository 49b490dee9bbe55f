import pytest

from fares.exceptions import InvalidInput, NotFound, PriceMismatch
from fares.services.pricing import PricingConfig, TripPricing
from fares.services.verification import BookingVerificationService


def test_verify_without_client_price():
    result = BookingVerificationService.verify(1, 150, 'oneway')
    assert result.verified is True
    assert result.fare.total == 2500.00
    assert result.breakdown['driverBata'] == 'Driver allowance = ₹400'
    assert result.breakdown['total'] == '₹2500'


def test_verify_matching_client_price():
    result = BookingVerificationService.verify(1, 150, 'oneway', client_calculated_price=2500)
    assert result.verified is True
    assert result.fare.total == 2500.00


def test_verify_within_tolerance():
    result = BookingVerificationService.verify(1, 150, 'oneway', client_calculated_price=2500.5)
    assert result.fare.total == 2500.00

    # exactly on the tolerance is still accepted
    BookingVerificationService.verify(1, 150, 'oneway', client_calculated_price=2499)


def test_verify_mismatch():
    with pytest.raises(PriceMismatch) as excinfo:
        BookingVerificationService.verify(1, 150, 'oneway', client_calculated_price=2502)

    err = excinfo.value
    assert err.server_calculated_price == 2500.00
    assert err.client_calculated_price == 2502
    assert err.difference == pytest.approx(2)
    payload = err.payload()
    assert payload['serverCalculatedPrice'] == 2500.00
    assert payload['difference'] == pytest.approx(2)


def test_verify_zero_client_price_is_compared():
    with pytest.raises(PriceMismatch):
        BookingVerificationService.verify(1, 150, 'oneway', client_calculated_price=0)


def test_verify_uses_configured_tolerance():
    config = PricingConfig(
        oneway=TripPricing(threshold=130, extra_km_rate=14),
        roundtrip=TripPricing(threshold=250, extra_km_rate=13),
        driver_bata=400,
        mismatch_tolerance=10,
    )
    result = BookingVerificationService.verify(1, 150, 'oneway', client_calculated_price=2509, config=config)
    assert result.fare.total == 2500.00

    with pytest.raises(PriceMismatch):
        BookingVerificationService.verify(1, 150, 'oneway', client_calculated_price=2511, config=config)


def test_verify_roundtrip_stale_rates():
    # client used the one-way rate for a round trip
    with pytest.raises(PriceMismatch) as excinfo:
        BookingVerificationService.verify(1, 150, 'roundtrip', client_calculated_price=300 * 14 + 400)
    assert excinfo.value.server_calculated_price == 4300.00
    assert excinfo.value.difference == pytest.approx(300)


def test_verify_unknown_vehicle():
    with pytest.raises(NotFound):
        BookingVerificationService.verify(42, 150, 'oneway', client_calculated_price=2500)


def test_verify_bad_client_price():
    with pytest.raises(InvalidInput):
        BookingVerificationService.verify(1, 150, 'oneway', client_calculated_price='lots')
