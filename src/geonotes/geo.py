# SPDX-License-Identifier: MIT

import math

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two coordinates using the Haversine formula.

    The intermediate term is clamped to [0, 1] so floating point drift on
    antipodal or near-pole inputs can never produce NaN.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_within_radius(
    center_lat: float,
    center_lng: float,
    lat: float,
    lng: float,
    radius_km: float,
) -> bool:
    return distance_km(center_lat, center_lng, lat, lng) <= radius_km
