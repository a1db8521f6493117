# SPDX-License-Identifier: MIT

from typing import NotRequired, Optional, TypedDict


class Coordinate(TypedDict):
    lat: float
    lng: float
    accuracy_meters: NotRequired[Optional[float]]


class LocationOptions(TypedDict):
    high_accuracy: bool
    timeout_ms: int
    max_age_ms: int


DEFAULT_LOCATION_OPTIONS: LocationOptions = {
    "high_accuracy": True,
    "timeout_ms": 15000,
    "max_age_ms": 30000,
}
