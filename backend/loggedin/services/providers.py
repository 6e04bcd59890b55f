"""Device-side evidence the check-in engine consumes.

The browser takes one position fix (``enableHighAccuracy``, a bounded
``timeout`` and ``maximumAge: 0``) and decodes QR frames itself; the
server only sees what the client submitted with the request. These
providers turn that submission into the engine's provider contracts.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from loggedin.services.verification_types import Position

class LocationAccessError(Exception):
    """No usable position: denied, timed out, unsupported or stale."""
    pass

class IpLookupError(Exception):
    """Client address could not be determined."""
    pass

class SubmittedPositionProvider:
    """Geolocation provider backed by a client-submitted reading.

    ``reading`` is ``{"latitude", "longitude", "accuracy", "timestamp"}``
    with ``timestamp`` in epoch milliseconds as the browser reports it.
    ``error`` is the message the browser's error callback produced.
    """

    def __init__(self, reading: Optional[Dict[str, Any]] = None, error: Optional[str] = None,
                 received_at: Optional[datetime] = None):
        self.reading = reading
        self.error = error
        self.received_at = received_at or datetime.now(timezone.utc)

    def get_current_position(self, timeout: float) -> Position:
        if self.error:
            raise LocationAccessError(str(self.error))

        if not isinstance(self.reading, dict):
            raise LocationAccessError("Geolocation is not supported by your browser")

        try:
            latitude = float(self.reading['latitude'])
            longitude = float(self.reading['longitude'])
        except (KeyError, TypeError, ValueError):
            raise LocationAccessError("Position reading is incomplete")

        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            raise LocationAccessError("Position reading is out of range")

        accuracy = self.reading.get('accuracy')
        try:
            accuracy = float(accuracy) if accuracy is not None else None
        except (TypeError, ValueError):
            accuracy = None

        # maximumAge is 0: a fix older than the acquisition window is a cached one
        timestamp = self.reading.get('timestamp')
        if timestamp is not None:
            try:
                taken_at = datetime.fromtimestamp(float(timestamp) / 1000, tz=timezone.utc)
            except (TypeError, ValueError, OverflowError, OSError):
                raise LocationAccessError("Position reading has an invalid timestamp")
            if (self.received_at - taken_at).total_seconds() > timeout:
                raise LocationAccessError("Timeout expired: position reading is stale")

        return Position(latitude=latitude, longitude=longitude, accuracy=accuracy)

class RequestIpProvider:
    """IP lookup provider reading the client address from a Flask request."""

    def __init__(self, request):
        self.request = request

    def get_public_ip(self) -> str:
        forwarded = self.request.headers.get('X-Forwarded-For', '')
        if forwarded:
            first_hop = forwarded.split(',')[0].strip()
            if first_hop:
                return first_hop

        if self.request.remote_addr:
            return self.request.remote_addr

        raise IpLookupError("Client address unavailable")

def describe_device(user_agent: Optional[str], platform: Optional[str] = None) -> str:
    """Device descriptor stored with attendance, ``"<platform> - <user agent>"``."""
    user_agent = (user_agent or '').strip()
    platform = (platform or '').strip()
    if platform and user_agent:
        return f"{platform} - {user_agent}"
    return platform or user_agent or 'unknown'
