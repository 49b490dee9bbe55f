from rest_framework import serializers

from .services.vehicles import TRIP_TYPES


class JSONNumberField(serializers.FloatField):
    """FloatField that only accepts JSON numbers; true/false and numeric strings are rejected."""

    def to_internal_value(self, data):
        if isinstance(data, (bool, str)):
            self.fail('invalid')
        return super().to_internal_value(data)


class CalculatePriceSerializer(serializers.Serializer):
    vehicleId = serializers.IntegerField(source='vehicle_id')
    distance = JSONNumberField()
    tripType = serializers.ChoiceField(choices=TRIP_TYPES, source='trip_type')


class VerifyBookingSerializer(CalculatePriceSerializer):
    clientCalculatedPrice = JSONNumberField(required=False, allow_null=True, source='client_calculated_price')


class VehicleSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    category = serializers.CharField()
    description = serializers.CharField()
    passengers = serializers.IntegerField()
    onewayRatePerKm = serializers.FloatField(source='oneway_rate_per_km')
    roundtripRatePerKm = serializers.FloatField(source='roundtrip_rate_per_km')


class FareBreakdownSerializer(serializers.Serializer):
    """Read-only camelCase view of a FareBreakdown."""
    vehicleId = serializers.IntegerField(source='vehicle.id')
    vehicleName = serializers.CharField(source='vehicle.name')
    tripType = serializers.CharField(source='trip_type')
    actualDistance = serializers.FloatField(source='actual_distance')
    chargeableDistance = serializers.FloatField(source='chargeable_distance')
    threshold = serializers.FloatField()
    ratePerKm = serializers.FloatField(source='rate_per_km')
    baseFare = serializers.FloatField(source='base_fare')
    baseKm = serializers.FloatField(source='base_km')
    extraKm = serializers.FloatField(source='extra_km')
    extraKmRate = serializers.FloatField(source='extra_km_rate')
    extraFee = serializers.FloatField(source='extra_fee')
    driverBata = serializers.FloatField(source='driver_bata')
    total = serializers.FloatField()


class VehicleQuerySerializer(serializers.Serializer):
    distance = serializers.FloatField(required=False)
    tripType = serializers.ChoiceField(choices=TRIP_TYPES, required=False, source='trip_type')

    def validate(self, data):
        if ('distance' in data) != ('trip_type' in data):
            raise serializers.ValidationError("Provide both 'distance' and 'tripType' to get fare estimates")
        return data


class LocationSerializer(serializers.Serializer):
    display_name = serializers.CharField(required=False, allow_blank=True, default='')
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lon = serializers.FloatField(min_value=-180, max_value=180)
    address = serializers.DictField(child=serializers.CharField(allow_blank=True, allow_null=True), required=False, default=dict)
    place_id = serializers.CharField(required=False, allow_blank=True, default='')
    type = serializers.CharField(required=False, allow_blank=True, default='')

    def to_representation(self, instance):
        return {
            'display_name': instance.display_name,
            'lat': instance.lat,
            'lon': instance.lon,
            'address': dict(instance.address or {}),
            'place_id': instance.place_id,
            'type': instance.type,
        }


class TripValidationSerializer(serializers.Serializer):
    tripType = serializers.ChoiceField(choices=TRIP_TYPES, source='trip_type')
    pickup = LocationSerializer(required=False, allow_null=True)
    dropoff = LocationSerializer(required=False, allow_null=True)
    pickupDateAndTime = serializers.CharField(required=False, allow_blank=True, allow_null=True, source='pickup_at')
    returnDateAndTime = serializers.CharField(required=False, allow_blank=True, allow_null=True, source='return_at')


class GeocodeQuerySerializer(serializers.Serializer):
    q = serializers.CharField(allow_blank=True, trim_whitespace=False)
    limit = serializers.IntegerField(min_value=1, max_value=10, default=5)
