import math
from typing import Optional

EARTH_RADIUS_KM = 6371.0


class GeoHelper:
    """Helper functions for location data attached to expenses"""

    @staticmethod
    def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Great-circle distance between two coordinates in kilometres"""
        phi1, phi2 = math.radians(lat1), math.radians(lat2)
        d_phi = math.radians(lat2 - lat1)
        d_lambda = math.radians(lng2 - lng1)

        a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
        return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))

    @staticmethod
    def is_geocoded(lat: Optional[float], lng: Optional[float]) -> bool:
        return lat is not None and lng is not None

    @staticmethod
    def derive_city(location_name: Optional[str]) -> Optional[str]:
        """
        Best-effort city token from a free-text place name.
        Takes the second-to-last comma separated segment, falling back to the
        first one. This is a string heuristic, not a boundary lookup.
        """
        if not location_name:
            return None

        parts = location_name.split(",")
        token = parts[-2].strip() if len(parts) >= 2 else ""
        if not token:
            token = parts[0].strip()

        return token or None
