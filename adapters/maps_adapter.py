"""
Google Distance Matrix client for drive times between two coordinates.

Without an API key the adapter stays disconnected and callers fall back to the
haversine estimate.
"""

from dataclasses import dataclass
from typing import Optional
import logging

import httpx

from app.exceptions import ExternalServiceError, GatewayTimeoutError
from core.geo import Coordinates

logger = logging.getLogger("offleash.adapters.maps")

DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"

_client: Optional[httpx.Client] = None
_api_key: Optional[str] = None


@dataclass(frozen=True)
class TravelTimeResult:
    duration_minutes: int
    distance_meters: int


def connect(api_key: Optional[str], timeout: float = 5.0):
    """Create the HTTP client; a missing key leaves the adapter unavailable."""
    global _client, _api_key
    if not api_key:
        logger.info("Google Maps API key not configured; using travel estimates")
        return
    _api_key = api_key
    _client = httpx.Client(timeout=timeout)
    logger.info("Maps adapter ready")


def close():
    global _client, _api_key
    try:
        if _client is not None:
            _client.close()
            logger.info("Maps adapter closed")
    except Exception:
        logger.exception("Error closing maps client")
    finally:
        _client = None
        _api_key = None


def is_available() -> bool:
    return _client is not None and bool(_api_key)


def get_travel_time(origin: Coordinates, destination: Coordinates) -> TravelTimeResult:
    """
    Driving time, in traffic when Google reports it.

    Raises:
        ExternalServiceError: adapter unavailable or provider error
        GatewayTimeoutError: provider did not answer in time
    """
    if not is_available():
        raise ExternalServiceError("Maps service not configured")

    params = {
        "origins": origin.to_lat_lng_string(),
        "destinations": destination.to_lat_lng_string(),
        "mode": "driving",
        "departure_time": "now",
        "key": _api_key,
    }
    try:
        resp = _client.get(DISTANCE_MATRIX_URL, params=params)
    except httpx.TimeoutException:
        logger.warning("Distance Matrix request timed out")
        raise GatewayTimeoutError("Maps service timed out")
    except httpx.HTTPError as e:
        logger.warning("Distance Matrix request failed: %s", e)
        raise ExternalServiceError("Maps service request failed")

    if resp.status_code >= 400:
        logger.warning("Distance Matrix error %s: %s", resp.status_code, resp.text[:200])
        raise ExternalServiceError(f"Maps service error: HTTP {resp.status_code}")

    body = resp.json()
    if body.get("status") != "OK":
        raise ExternalServiceError(f"Maps API error: {body.get('status')}")

    rows = body.get("rows") or []
    elements = rows[0].get("elements") if rows else None
    if not elements:
        raise ExternalServiceError("Maps API returned no results")

    element = elements[0]
    if element.get("status") != "OK":
        raise ExternalServiceError(f"Maps element error: {element.get('status')}")

    duration = element.get("duration_in_traffic") or element.get("duration")
    distance = element.get("distance")
    if not duration or not distance:
        raise ExternalServiceError("Maps API response missing duration or distance")

    return TravelTimeResult(
        duration_minutes=int(duration["value"]) // 60,
        distance_meters=int(distance["value"]),
    )
