"""Helper functions for the application."""
from datetime import datetime, timezone
from flask import jsonify
from typing import Any, Optional

def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the database columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string into a naive UTC datetime.

    Offsets are converted to UTC; a trailing ``Z`` is accepted.
    Returns None for empty or unparseable input.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
        except ValueError:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    message = getattr(error, 'description', None) or str(error)
    return jsonify({
        'error': True,
        'message': message,
        'status_code': status_code
    }), status_code

def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code

def error_response(message: str, status_code: int = 400):
    """Return consistent error response."""
    return jsonify({
        'error': True,
        'message': message,
        'status_code': status_code
    }), status_code
