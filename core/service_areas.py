"""Walker service area matching (polygon coverage with priority ordering)."""

from dataclasses import dataclass, field
from typing import Hashable, List, Optional, Sequence

from core.geo import Coordinates


@dataclass(frozen=True)
class PolygonPoint:
    lat: float
    lng: float


@dataclass
class ServiceAreaBoundary:
    walker_id: Hashable
    area_id: Hashable
    name: str
    polygon: List[PolygonPoint] = field(default_factory=list)
    min_lat: float = 0.0
    max_lat: float = 0.0
    min_lng: float = 0.0
    max_lng: float = 0.0
    priority: int = 0
    price_adjustment_percent: int = 0

    @classmethod
    def from_polygon(
        cls,
        walker_id: Hashable,
        area_id: Hashable,
        name: str,
        polygon: Sequence[PolygonPoint],
        priority: int = 0,
        price_adjustment_percent: int = 0,
    ) -> "ServiceAreaBoundary":
        points = list(polygon)
        lats = [p.lat for p in points] or [0.0]
        lngs = [p.lng for p in points] or [0.0]
        return cls(
            walker_id=walker_id,
            area_id=area_id,
            name=name,
            polygon=points,
            min_lat=min(lats),
            max_lat=max(lats),
            min_lng=min(lngs),
            max_lng=max(lngs),
            priority=priority,
            price_adjustment_percent=price_adjustment_percent,
        )

    def contains(self, coords: Coordinates) -> bool:
        # Cheap bounding box rejection first
        if not coords.is_within_bounds(self.min_lat, self.max_lat, self.min_lng, self.max_lng):
            return False
        return coords.is_within_polygon([(p.lat, p.lng) for p in self.polygon])


@dataclass(frozen=True)
class ServiceAreaMatch:
    walker_id: Hashable
    area_id: Hashable
    area_name: str
    priority: int
    price_adjustment_percent: int


def _to_match(area: ServiceAreaBoundary) -> ServiceAreaMatch:
    return ServiceAreaMatch(
        walker_id=area.walker_id,
        area_id=area.area_id,
        area_name=area.name,
        priority=area.priority,
        price_adjustment_percent=area.price_adjustment_percent,
    )


def find_walkers_for_location(areas: Sequence[ServiceAreaBoundary], coords: Coordinates) -> List[ServiceAreaMatch]:
    """All areas covering ``coords``, lowest priority value (most preferred) first."""
    matches = [_to_match(a) for a in areas if a.contains(coords)]
    matches.sort(key=lambda m: m.priority)
    return matches


def walker_can_service_location(
    areas: Sequence[ServiceAreaBoundary], walker_id: Hashable, coords: Coordinates
) -> Optional[ServiceAreaMatch]:
    covering = [a for a in areas if a.walker_id == walker_id and a.contains(coords)]
    if not covering:
        return None
    return _to_match(min(covering, key=lambda a: a.priority))
