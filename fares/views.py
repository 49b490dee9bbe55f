import logging
from rest_framework.views import APIView
from rest_framework.response import Response

from .serializers import (
    CalculatePriceSerializer,
    FareBreakdownSerializer,
    GeocodeQuerySerializer,
    LocationSerializer,
    TripValidationSerializer,
    VehicleQuerySerializer,
    VehicleSerializer,
    VerifyBookingSerializer,
)
from .services.geocode import GeocodingService, haversine_km
from .services.pricing import PricingConfig, PricingService, format_breakdown
from .services.service_area import Location, validate_locations, validate_trip
from .services.verification import BookingVerificationService
from .services.vehicles import VehicleCatalog

logger = logging.getLogger(__name__)


class CalculatePriceView(APIView):
    """Server-side quote for a vehicle, distance and trip type."""

    def post(self, request):
        serializer = CalculatePriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        config = PricingConfig.from_settings()
        fare = PricingService.quote(data['vehicle_id'], data['distance'], data['trip_type'], config=config)

        calculation = FareBreakdownSerializer(fare).data
        calculation['breakdown'] = format_breakdown(fare, config=config)
        return Response({'success': True, 'calculation': calculation})


class VerifyBookingView(APIView):
    """Recalculate the fare before booking and reject a tampered or stale client total (409)."""

    def post(self, request):
        serializer = VerifyBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = BookingVerificationService.verify(
            data['vehicle_id'],
            data['distance'],
            data['trip_type'],
            client_calculated_price=data.get('client_calculated_price'),
        )

        booking = FareBreakdownSerializer(result.fare).data
        booking['breakdown'] = result.breakdown
        return Response({'success': True, 'verified': result.verified, 'booking': booking})


class VehicleListView(APIView):
    def get(self, request):
        serializer = VehicleQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        catalog = VehicleCatalog.from_settings()
        vehicles = [VehicleSerializer(v).data for v in catalog]

        if 'distance' in data:
            fares = PricingService.estimate_for_catalog(data['distance'], data['trip_type'], catalog=catalog)
            for row, fare in zip(vehicles, fares):
                row.update({
                    'pricePerKm': fare.rate_per_km,
                    'estimatedFare': fare.base_fare,
                    'distance': fare.actual_distance,
                    'extraKm': fare.extra_km,
                    'extraFee': fare.extra_fee,
                    'total': fare.total,
                })

        return Response({'vehicles': vehicles})


class TripValidationView(APIView):
    """Completeness and service-area checks for a trip. Always 200 with ok/message."""

    def post(self, request):
        serializer = TripValidationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        pickup = Location(**data['pickup']) if data.get('pickup') else None
        dropoff = Location(**data['dropoff']) if data.get('dropoff') else None

        result = validate_trip(data['trip_type'], pickup, dropoff, data.get('pickup_at'), data.get('return_at'))
        if result.ok:
            result = validate_locations(pickup, dropoff)

        body = {'ok': result.ok}
        if result.message:
            body['message'] = result.message
        if result.invalid_location:
            body['invalidLocation'] = result.invalid_location
        if result.ok:
            body['straightLineDistanceKm'] = haversine_km(pickup, dropoff)
        else:
            logger.info('Trip rejected: %s', result.message)
        return Response(body)


class GeocodeView(APIView):
    def get(self, request):
        serializer = GeocodeQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        locations = GeocodingService.geocode(data['q'], limit=data['limit'])
        return Response({'results': LocationSerializer(locations, many=True).data})
