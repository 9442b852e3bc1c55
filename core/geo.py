"""
Geographic helpers: validated coordinates, haversine distance, a speed-banded
drive time estimate and point-in-polygon tests for service areas.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

EARTH_RADIUS_KM = 6371.0
KM_TO_MILES = 0.621371
MIN_TRAVEL_MINUTES = 5


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Invalid latitude: {self.latitude}. Must be between -90 and 90")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Invalid longitude: {self.longitude}. Must be between -180 and 180")

    @classmethod
    def unchecked(cls, latitude: float, longitude: float) -> "Coordinates":
        """Build without range validation (values already stored by the API)."""
        obj = object.__new__(cls)
        object.__setattr__(obj, "latitude", float(latitude))
        object.__setattr__(obj, "longitude", float(longitude))
        return obj

    def distance_km(self, other: "Coordinates") -> float:
        """Great-circle (haversine) distance in kilometers."""
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        dlat = math.radians(other.latitude - self.latitude)
        dlon = math.radians(other.longitude - self.longitude)

        a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        c = 2 * math.asin(math.sqrt(a))
        return EARTH_RADIUS_KM * c

    def distance_miles(self, other: "Coordinates") -> float:
        return self.distance_km(other) * KM_TO_MILES

    def distance_meters(self, other: "Coordinates") -> int:
        return int(round(self.distance_km(other) * 1000))

    def estimate_travel_minutes(self, other: "Coordinates") -> int:
        """
        Rough drive time without a routing service.

        Short trips assume city speeds (25 km/h), up to 20 km suburban (35 km/h),
        longer trips a highway mix (50 km/h). Never less than 5 minutes.
        """
        distance_km = self.distance_km(other)
        if distance_km < 5.0:
            avg_speed_kmh = 25.0
        elif distance_km < 20.0:
            avg_speed_kmh = 35.0
        else:
            avg_speed_kmh = 50.0

        minutes = math.ceil(distance_km / avg_speed_kmh * 60.0)
        return max(minutes, MIN_TRAVEL_MINUTES)

    def to_lat_lng_string(self) -> str:
        return f"{self.latitude!r},{self.longitude!r}"

    def is_within_polygon(self, polygon: Sequence[Tuple[float, float]]) -> bool:
        """Ray casting over (lat, lng) vertices; degenerate polygons contain nothing."""
        n = len(polygon)
        if n < 3:
            return False

        inside = False
        j = n - 1
        for i in range(n):
            lat_i, lng_i = polygon[i]
            lat_j, lng_j = polygon[j]
            if (lng_i > self.longitude) != (lng_j > self.longitude) and self.latitude < (
                (lat_j - lat_i) * (self.longitude - lng_i) / (lng_j - lng_i) + lat_i
            ):
                inside = not inside
            j = i
        return inside

    def is_within_bounds(self, min_lat: float, max_lat: float, min_lng: float, max_lng: float) -> bool:
        return min_lat <= self.latitude <= max_lat and min_lng <= self.longitude <= max_lng
