"""Validation utilities for the application."""
import re
from typing import Dict, List, Any

class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))

    @staticmethod
    def is_institutional_email(email: str, domain: str) -> bool:
        """Case-sensitive suffix match against the institution's domain."""
        return bool(email) and email.endswith(domain)

    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        """Validate password strength."""
        errors = []

        if not password:
            errors.append("Password is required")
        elif len(password) < 8:
            errors.append("Password must be at least 8 characters long")
        elif len(password) > 128:
            errors.append("Password is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_coordinates(latitude: float, longitude: float, radius: float) -> Dict[str, Any]:
        """Validate a geofence center and radius."""
        errors = []

        if not -90 <= latitude <= 90:
            errors.append("Latitude must be between -90 and 90")
        if not -180 <= longitude <= 180:
            errors.append("Longitude must be between -180 and 180")
        if radius <= 0:
            errors.append("Radius must be greater than zero")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        errors = []

        for field in required_fields:
            if field not in data or not data[field]:
                errors.append(f"{field.title()} is required")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }
