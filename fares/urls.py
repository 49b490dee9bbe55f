from django.urls import path
from .views import CalculatePriceView, GeocodeView, TripValidationView, VehicleListView, VerifyBookingView

app_name = 'fares'

urlpatterns = [
    path('api/calculate-price/', CalculatePriceView.as_view(), name='calculate_price'),
    path('api/verify-booking/', VerifyBookingView.as_view(), name='verify_booking'),
    path('api/vehicles/', VehicleListView.as_view(), name='vehicles'),
    path('api/validate-trip/', TripValidationView.as_view(), name='validate_trip'),
    path('api/geocode/', GeocodeView.as_view(), name='geocode'),
]
