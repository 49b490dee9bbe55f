import os
from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-in-production")

# Read DEBUG from environment; defaults to True for local development
DEBUG = os.getenv("DJANGO_DEBUG", "True") == "True"

allowed_hosts = os.getenv("DJANGO_ALLOWED_HOSTS", "*")
ALLOWED_HOSTS = [h.strip() for h in allowed_hosts.split(",") if h.strip()]

INSTALLED_APPS = [
    # third party
    "rest_framework",

    # local
    "fares",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "fares_project.urls"

WSGI_APPLICATION = "fares_project.wsgi.application"

# Quotes are computed per request and never stored
DATABASES = {}

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "fares.exceptions.api_exception_handler",
}

CACHES = {
    "default": {
        "BACKEND": os.getenv("CACHE_BACKEND", "django.core.cache.backends.locmem.LocMemCache"),
        "LOCATION": os.getenv("CACHE_LOCATION", "fares-cache"),
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kolkata"
USE_I18N = True
USE_TZ = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "fares": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# Mapbox forward geocoding (server-side lookups for the location picker)
MAPBOX_TOKEN = os.getenv("MAPBOX_TOKEN", "")
GEOCODE_URL = os.getenv("GEOCODE_URL", "https://api.mapbox.com/geocoding/v5/mapbox.places/")
# Cache timeout for geocode results (seconds)
GEOCODE_CACHE_TIMEOUT = int(os.getenv("GEOCODE_CACHE_TIMEOUT", str(24 * 3600)))
# Minimum spacing between upstream geocode requests (milliseconds)
GEOCODE_MIN_INTERVAL_MS = int(os.getenv("GEOCODE_MIN_INTERVAL_MS", "100"))

# States we operate in; comma separated override via env
service_states = os.getenv("SERVICE_AREA_STATES", "")
if service_states:
    SERVICE_AREA_STATES = [s.strip() for s in service_states.split(",") if s.strip()]
else:
    SERVICE_AREA_STATES = ["Tamil Nadu", "Kerala", "Puducherry", "Pondicherry"]

# Pricing constants
PRICING = {
    # threshold: km included in the base fare, extra_km_rate: charge per km beyond it
    "ONEWAY": {"threshold": 130, "extra_km_rate": 14},
    "ROUNDTRIP": {"threshold": 250, "extra_km_rate": 13},
    # Flat driver allowance added to every trip
    "DRIVER_BATA": 400,
    # Client totals within this many currency units of ours are accepted
    "MISMATCH_TOLERANCE": float(os.getenv("PRICE_MISMATCH_TOLERANCE", "1")),
    "CURRENCY_SYMBOL": "₹",
}

VEHICLES = [
    {
        "id": 1,
        "name": "Hatchback",
        "description": "Compact and economical",
        "category": "Sedan",
        "passengers": 4,
        "oneway_rate_per_km": 14,
        "roundtrip_rate_per_km": 13,
    },
    {
        "id": 2,
        "name": "Sedan (Etios)",
        "description": "Comfortable sedan",
        "category": "MUV",
        "passengers": 5,
        "oneway_rate_per_km": 14,
        "roundtrip_rate_per_km": 13,
    },
    {
        "id": 3,
        "name": "SUV",
        "description": "Spacious SUV",
        "category": "Sedan",
        "passengers": 5,
        "oneway_rate_per_km": 19,
        "roundtrip_rate_per_km": 17,
    },
    {
        "id": 4,
        "name": "Innova",
        "description": "Premium MPV",
        "category": "SUV",
        "passengers": 7,
        "oneway_rate_per_km": 20,
        "roundtrip_rate_per_km": 18,
    },
]
