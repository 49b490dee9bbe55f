import os
os.environ['DJANGO_SETTINGS_MODULE'] = 'fares_project.settings'
os.environ.setdefault('MAPBOX_TOKEN', 'server-token')
import django
django.setup()
from fares.services.geocode import GeocodingService
import requests

called = {}

def fake_get(url, params=None, headers=None, timeout=None):
    called['url'] = url
    called['params'] = params
    # Minimal fake response structure
    return type('R', (), {'raise_for_status': lambda self: None, 'json': lambda self: {"features": [{"id": "place.1", "text": "Chennai", "place_name": "Chennai, Tamil Nadu, India", "place_type": ["place"], "center": [80.27, 13.08], "context": [{"id": "region.1", "text": "Tamil Nadu"}, {"id": "country.1", "text": "India", "short_code": "in"}]}]}})()

orig_get = requests.get
requests.get = fake_get

try:
    results = GeocodingService.geocode('Chennai', use_cache=False)
    print('results=', [(r.display_name, r.state) for r in results])
    print('url=', called.get('url'))
    print('sent_token=', called.get('params', {}).get('access_token'))
finally:
    requests.get = orig_get
