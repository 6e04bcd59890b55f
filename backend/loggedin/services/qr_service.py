"""QR code payload generation and validation service."""
import json
import logging
from typing import Iterable
from loggedin.services.verification_types import Rejected, Verified, VerificationOutcome

logger = logging.getLogger(__name__)

class QRService:
    """Service for QR code operations.

    An event's QR code encodes ``{"eventId": <id>, "secret": <qr_code_secret>}``.
    The secret is a static shared string compared by exact equality; it is
    neither signed nor time-limited.
    """

    @staticmethod
    def build_payload(event) -> str:
        """Return the string an admin encodes into the event's QR image."""
        return json.dumps(
            {'eventId': event.id, 'secret': event.qr_code_secret},
            separators=(',', ':')
        )

    @staticmethod
    def verify_qr_code(qr_data_string: str, events: Iterable) -> VerificationOutcome:
        """Validate a scanned payload against the known events.

        Never raises: malformed input becomes a ``Rejected`` outcome.
        """
        try:
            qr_data = json.loads(qr_data_string)
        except (ValueError, TypeError, RecursionError) as e:
            logger.debug("Unparseable QR payload: %s", e)
            return Rejected("Invalid QR code format")

        if not isinstance(qr_data, dict):
            return Rejected("Invalid QR code")

        event_id = qr_data.get('eventId')
        secret = qr_data.get('secret')
        if not event_id or not secret:
            return Rejected("Invalid QR code")

        event = next((e for e in events if str(e.id) == str(event_id)), None)
        if event is None:
            return Rejected("Event not found")

        if event.qr_code_secret != secret:
            return Rejected("Invalid QR code secret")

        return Verified(event.id, "QR code verified")
