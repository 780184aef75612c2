"""Cemetery search: geocoder adapters and the search resolver."""

from gravemap.search.geocoder import GeocodeHit, Geocoder, MockGeocoder, NominatimGeocoder, create_geocoder
from gravemap.search.resolver import NotFound, SearchResolver, SearchResult

__all__ = [
    "GeocodeHit",
    "Geocoder",
    "MockGeocoder",
    "NominatimGeocoder",
    "NotFound",
    "SearchResolver",
    "SearchResult",
    "create_geocoder",
]
