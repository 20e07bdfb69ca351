"""Latitude/longitude positions for fleet units and pickup requests.

Positions are immutable: the motion tick produces a new ``GeoPoint`` for a
unit instead of moving one in place, so a snapshot handed to a caller never
changes under it. No geodesic math is done here; units drift by small
degree offsets only.
"""

from __future__ import annotations

from dataclasses import dataclass

from ambusim.unit import Degree


class Latitude(Degree):
    """Latitude coordinate in degrees (-90° to +90°)."""

    IS_FAMILY_ROOT = True
    SYMBOL = "°N/S"


class Longitude(Degree):
    """Longitude coordinate in degrees (-180° to +180°)."""

    IS_FAMILY_ROOT = True
    SYMBOL = "°E/W"


@dataclass(frozen=True)
class GeoPoint:
    """A geographic point with latitude and longitude coordinates.

    Latitude and longitude are separate quantity families, so swapping them
    by mistake in arithmetic raises ``TypeError``.

    Attributes:
        latitude (Latitude): North/South position.
        longitude (Longitude): East/West position.

    Example:
        >>> depot = GeoPoint.from_deg(40.7128, -74.006)
        >>> depot.lat_deg
        40.7128
        >>> depot.offset(0.0005, -0.0005).lon_deg
        -74.0065
    """

    latitude: Latitude
    longitude: Longitude

    @classmethod
    def from_deg(cls, lat: float, lon: float) -> GeoPoint:
        """Create a point from decimal degrees.

        Args:
            lat (float): Latitude, negative for South.
            lon (float): Longitude, negative for West.
        """
        return cls(Latitude(lat), Longitude(lon))

    @property
    def lat_deg(self) -> float:
        return round(self.latitude.to(Latitude), 10)

    @property
    def lon_deg(self) -> float:
        return round(self.longitude.to(Longitude), 10)

    def offset(self, d_lat: float, d_lon: float) -> GeoPoint:
        """Return a new point shifted by the given offsets in degrees."""
        return GeoPoint.from_deg(self.lat_deg + d_lat, self.lon_deg + d_lon)

    def as_dict(self) -> dict[str, float]:
        return {"latitude": self.lat_deg, "longitude": self.lon_deg}

    def __str__(self) -> str:
        return f"({self.lat_deg:.4f}, {self.lon_deg:.4f})"
