"""
Core scheduling logic.

Pure, deterministic building blocks used by the services layer: value types,
geography, slot availability, traffic adjustment, route optimization, service
area matching and recurrence expansion. Nothing in this package performs I/O.
"""

from core.types import Money, DurationMinutes, TimeSlot
from core.geo import Coordinates

__all__ = ["Money", "DurationMinutes", "TimeSlot", "Coordinates"]
