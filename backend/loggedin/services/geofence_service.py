"""Geofence verification service."""
import logging
import math
from typing import Any, Dict, Optional
from loggedin.services.verification_types import Position, Rejected, Verified, VerificationOutcome

logger = logging.getLogger(__name__)

class GeofenceService:
    """Service for GPS and geofence verification."""

    EARTH_RADIUS_METERS = 6371000  # 6371 km

    CIRCLE = 'circle'

    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two GPS points in meters."""
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return GeofenceService.EARTH_RADIUS_METERS * c

    @staticmethod
    def build_circle(latitude: float, longitude: float, radius: float) -> Dict[str, Any]:
        """Build a circular geofence descriptor."""
        return {
            'type': GeofenceService.CIRCLE,
            'center': {
                'latitude': latitude,
                'longitude': longitude
            },
            'radius': radius
        }

    @staticmethod
    def verify_location(geo_fence: Optional[Dict[str, Any]], position: Position,
                        event_id: Optional[str] = None) -> VerificationOutcome:
        """Verify that ``position`` lies inside ``geo_fence``."""
        if not geo_fence:
            return Rejected("No geofence defined for this event")

        if geo_fence.get('type') != GeofenceService.CIRCLE:
            return Rejected("Unsupported geofence type")

        try:
            center = geo_fence['center']
            radius = float(geo_fence['radius'])
            distance = GeofenceService.calculate_distance(
                position.latitude, position.longitude,
                float(center['latitude']), float(center['longitude'])
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed geofence %r: %s", geo_fence, e)
            return Rejected("Error verifying location")

        if distance <= radius:
            return Verified(event_id, "Location verified", distance_meters=distance)

        return Rejected("You are not at the event location", distance_meters=distance)
