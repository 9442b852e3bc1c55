"""
Traffic-aware travel adjustments: rush-hour multipliers and cache freshness.
"""

import enum
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Tuple


@dataclass
class TrafficConfig:
    # (start_hour, end_hour) pairs; an hour h is peak when start <= h < end
    peak_hours: List[Tuple[int, int]] = field(default_factory=lambda: [(7, 9), (16, 18)])
    peak_multiplier: float = 1.3
    cache_ttl_peak_minutes: int = 240
    cache_ttl_offpeak_minutes: int = 1440

    def is_peak_hour(self, when: datetime) -> bool:
        return any(start <= when.hour < end for start, end in self.peak_hours)

    def get_multiplier(self, when: datetime) -> float:
        return self.peak_multiplier if self.is_peak_hour(when) else 1.0

    def get_cache_ttl_minutes(self, when: datetime) -> int:
        return self.cache_ttl_peak_minutes if self.is_peak_hour(when) else self.cache_ttl_offpeak_minutes

    def adjust_travel_time(self, base_minutes: int, when: datetime) -> int:
        # round() guards against float noise such as 20 * 1.3 == 26.000000000000004
        return math.ceil(round(base_minutes * self.get_multiplier(when), 6))


class TravelConfidence(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"

    @classmethod
    def from_cache_age(cls, age_minutes: int, is_peak: bool, config: TrafficConfig) -> "TravelConfidence":
        ttl = config.cache_ttl_peak_minutes if is_peak else config.cache_ttl_offpeak_minutes
        if age_minutes <= ttl // 2:
            return cls.HIGH
        if age_minutes <= ttl:
            return cls.MEDIUM
        return cls.LOW
