"""Event management service."""
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional
from flask import current_app
from loggedin.models.event import Event
from loggedin.services.errors import ServiceError
from loggedin.services.geofence_service import GeofenceService
from loggedin.services.record_store import RecordStore, RecordNotFoundError, RecordStoreError
from loggedin.utils.helpers import parse_datetime, utcnow
from loggedin.utils.validators import Validator

logger = logging.getLogger(__name__)

TRUE_VALUES = {'true', '1', 'yes', 'on'}
FALSE_VALUES = {'false', '0', 'no', 'off'}

class EventError(ServiceError):
    """Event validation or persistence failure."""
    pass

class EventService:
    """Admin-side event lifecycle plus the student-facing listing."""

    @staticmethod
    def _store(store=None) -> RecordStore:
        return store or RecordStore()

    @staticmethod
    def _build_geo_fence(data: Dict[str, Any], existing: Optional[Dict] = None) -> Optional[Dict]:
        """Build a circular geofence from form fields.

        Accepts either flat ``latitude``/``longitude``/``radius`` fields or a
        ``geo_fence`` object. Returns the existing fence when no location
        fields were sent, and None to clear it when both coordinates are
        explicitly blank.
        """
        fence = data.get('geo_fence')
        if isinstance(fence, dict):
            center = fence.get('center') or {}
            latitude, longitude = center.get('latitude'), center.get('longitude')
            radius = fence.get('radius')
            if fence.get('type', GeofenceService.CIRCLE) != GeofenceService.CIRCLE:
                raise EventError("Unsupported geofence type")
        elif 'geo_fence' in data and fence is None:
            return None
        elif any(key in data for key in ('latitude', 'longitude', 'radius')):
            # fields left out keep their current values
            center = (existing or {}).get('center') or {}
            latitude = data['latitude'] if 'latitude' in data else center.get('latitude')
            longitude = data['longitude'] if 'longitude' in data else center.get('longitude')
            radius = data.get('radius')
        else:
            return existing

        if latitude in (None, '') and longitude in (None, ''):
            return None

        try:
            latitude = float(latitude)
            longitude = float(longitude)
        except (TypeError, ValueError):
            raise EventError("Latitude and longitude must be numbers")

        if radius in (None, ''):
            radius = (existing or {}).get('radius') or current_app.config.get('DEFAULT_GEOFENCE_RADIUS_METERS', 100)
        try:
            radius = float(radius)
        except (TypeError, ValueError):
            raise EventError("Radius must be a number")

        result = Validator.validate_coordinates(latitude, longitude, radius)
        if not result['is_valid']:
            raise EventError('; '.join(result['errors']))

        return GeofenceService.build_circle(latitude, longitude, radius)

    @staticmethod
    def _parse_flag(data: Dict[str, Any], key: str, default: bool) -> bool:
        """Read a boolean form field; strings like "false" or "0" are accepted."""
        value = data.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        normalized = str(value).strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
        raise EventError(f"{key} must be true or false")

    @staticmethod
    def _validate(data: Dict[str, Any], existing: Optional[Event] = None) -> Dict[str, Any]:
        """Validate create/update input and return model fields."""
        if not isinstance(data, dict):
            raise EventError("Request body must be a JSON object")

        merged = {
            'title': existing.title if existing else None,
            'description': existing.description if existing else None,
            'location': existing.location if existing else None,
        }
        for field in merged:
            if field in data:
                merged[field] = str(data.get(field) or '').strip() or None

        result = Validator.validate_required_fields(merged, ['title', 'description', 'location'])
        if not result['is_valid']:
            raise EventError("Please fill in all required fields: " + ', '.join(result['errors']))

        start_time = parse_datetime(data['start_time']) if 'start_time' in data else \
            (existing.start_time if existing else None)
        end_time = parse_datetime(data['end_time']) if 'end_time' in data else \
            (existing.end_time if existing else None)
        if start_time is None or end_time is None:
            raise EventError("Valid start_time and end_time are required")
        if end_time <= start_time:
            raise EventError("End time must be after start time")

        fields = dict(merged)
        fields['start_time'] = start_time
        fields['end_time'] = end_time
        fields['attendance_required'] = EventService._parse_flag(
            data, 'attendance_required', existing.attendance_required if existing else True
        )
        fields['geo_fence'] = EventService._build_geo_fence(data, existing.geo_fence if existing else None)
        return fields

    @staticmethod
    def list_upcoming(store=None) -> List[Event]:
        """Events that have not ended yet, soonest first."""
        return EventService._store(store).query(
            'events', filters={'end_time__gte': utcnow()}, order_by='start_time'
        )

    @staticmethod
    def list_all(store=None) -> List[Event]:
        """All events, newest start first."""
        return EventService._store(store).query('events', order_by='start_time', descending=True)

    @staticmethod
    def get_event(event_id: str, store=None) -> Event:
        event = EventService._store(store).get('events', event_id)
        if event is None:
            raise EventError("Event not found", 404)
        return event

    @staticmethod
    def create_event(data: Dict[str, Any], store=None) -> Event:
        """Create an event with a freshly generated QR secret."""
        fields = EventService._validate(data or {})
        fields['qr_code_secret'] = Event.generate_qr_code_secret()
        try:
            event = EventService._store(store).insert('events', fields)
        except RecordStoreError as e:
            raise EventError("Failed to save event", 500) from e

        logger.info("Event created: %s (%s)", event.title, event.id)
        return event

    @staticmethod
    def update_event(event_id: str, data: Dict[str, Any], store=None) -> Event:
        """Update an event. The QR secret is never changed."""
        store = EventService._store(store)
        event = EventService.get_event(event_id, store)
        fields = EventService._validate(data or {}, existing=event)
        try:
            return store.update('events', event_id, fields)
        except RecordNotFoundError:
            raise EventError("Event not found", 404)
        except RecordStoreError as e:
            raise EventError("Failed to save event", 500) from e

    @staticmethod
    def delete_event(event_id: str, store=None) -> None:
        try:
            EventService._store(store).delete('events', event_id)
        except RecordNotFoundError:
            raise EventError("Event not found", 404)
        except RecordStoreError as e:
            raise EventError("Failed to delete event", 500) from e

        logger.info("Event deleted: %s", event_id)

    @staticmethod
    def seed_sample_events(store=None) -> List[Event]:
        """Create the sample events unless an event with the same title exists."""
        store = EventService._store(store)
        now = utcnow()
        center = (14.5995, 120.9842)
        samples = [
            ("Programming Workshop", "Learn the basics of programming with Python",
             "Computer Lab 101", 24, 26, True, 100, "workshop123"),
            ("Career Fair", "Connect with potential employers",
             "Main Auditorium", 48, 54, True, 150, "career456"),
            ("Robotics Club Meeting", "Weekly meeting of the robotics club",
             "Engineering Building, Room 203", 72, 74, False, 50, "robotics789"),
        ]

        events = []
        for title, description, location, start_h, end_h, required, radius, secret in samples:
            existing = store.query('events', filters={'title': title}, limit=1)
            if existing:
                events.append(existing[0])
                continue
            try:
                events.append(store.insert('events', {
                    'title': title,
                    'description': description,
                    'location': location,
                    'start_time': now + timedelta(hours=start_h),
                    'end_time': now + timedelta(hours=end_h),
                    'attendance_required': required,
                    'geo_fence': GeofenceService.build_circle(center[0], center[1], radius),
                    'qr_code_secret': secret,
                }))
            except RecordStoreError as e:
                raise EventError("Failed to seed events", 500) from e

        return events
