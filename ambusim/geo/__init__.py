"""Geographic coordinates for fleet positions.

Components:
    GeoPoint: Immutable latitude/longitude pair
    Latitude: Latitude coordinate in degrees
    Longitude: Longitude coordinate in degrees

Typical Usage:
    >>> from ambusim.geo import GeoPoint
    >>> pickup = GeoPoint.from_deg(40.7130, -74.0050)
    >>> str(pickup)
    '(40.7130, -74.0050)'
"""

from .geo_point import GeoPoint, Latitude, Longitude

__all__ = ["GeoPoint", "Latitude", "Longitude"]
