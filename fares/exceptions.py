import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class FareError(Exception):
    """Base class for errors raised by the fare services.

    The services stay free of HTTP concerns; ``api_exception_handler`` turns
    these into responses using ``status_code`` and ``payload()``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.error
        super().__init__(self.message)

    def payload(self) -> dict:
        return {"error": self.message}


class InvalidInput(FareError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid input"


class NotFound(FareError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class GeocodingError(FareError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "Geocoding failed"


class PriceMismatch(FareError):
    status_code = status.HTTP_409_CONFLICT
    error = "Price mismatch detected"

    def __init__(self, server_calculated_price: float, client_calculated_price: float, difference: float):
        super().__init__(self.error)
        self.server_calculated_price = server_calculated_price
        self.client_calculated_price = client_calculated_price
        self.difference = difference

    def payload(self) -> dict:
        return {
            "error": self.error,
            "message": "The price has been recalculated. Please review the updated amount.",
            "serverCalculatedPrice": self.server_calculated_price,
            "clientCalculatedPrice": self.client_calculated_price,
            "difference": self.difference,
        }


def _first_message(detail):
    if isinstance(detail, dict):
        for field, value in detail.items():
            msg = _first_message(value)
            if field == "non_field_errors":
                return msg
            return f"{field}: {msg}"
    if isinstance(detail, (list, tuple)) and detail:
        return _first_message(detail[0])
    return str(detail)


def api_exception_handler(exc, context):
    """REST framework exception handler for the fares API."""
    if isinstance(exc, FareError):
        if exc.status_code >= 500:
            logger.error('%s: %s', exc.__class__.__name__, exc.message)
        return Response(exc.payload(), status=exc.status_code)

    if isinstance(exc, ValidationError):
        return Response({"error": _first_message(exc.detail), "details": exc.detail}, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        if detail is not None:
            response.data = {"error": str(detail)}
        return response

    view = context.get("view")
    logger.exception('Unhandled error in %s', view.__class__.__name__ if view else 'view')
    return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
