# SPDX-License-Identifier: MIT

from typing import Optional, Protocol

from geonotes.error import LocationError, LocationErrorCode
from geonotes.model.location import Coordinate, LocationOptions


class LocationProvider(Protocol):
    async def get_current_coordinate(self, options: LocationOptions) -> Coordinate: ...


class StaticLocationProvider:
    """
    Location provider for environments without a positioning device.

    Answers with a fixed coordinate, typically the one given on the command
    line or the last location stored in the configuration.
    """

    def __init__(self, coordinate: Optional[Coordinate]) -> None:
        self.coordinate = coordinate

    async def get_current_coordinate(self, options: LocationOptions) -> Coordinate:
        if self.coordinate is None:
            raise LocationError(
                LocationErrorCode.UNAVAILABLE,
                "No location available. Pass --lat/--lng or set last_location",
            )
        return {
            "lat": self.coordinate["lat"],
            "lng": self.coordinate["lng"],
            "accuracy_meters": self.coordinate.get("accuracy_meters"),
        }


async def try_get_coordinate(
    provider: LocationProvider, options: LocationOptions
) -> Optional[Coordinate]:
    """Resolve the current coordinate, treating any location failure as absent."""
    try:
        return await provider.get_current_coordinate(options)
    except LocationError:
        return None
