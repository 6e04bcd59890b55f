"""Custom decorators for authorization."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt_identity
from loggedin.models.user import UserRole
from loggedin.services.auth_service import AuthService
from loggedin.utils.helpers import error_response

def _role_required(role: UserRole, message: str):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = AuthService.get_user_by_id(get_jwt_identity())

            if not user:
                return error_response("User not found", 404)

            if not user.is_active:
                return error_response("Account is deactivated", 403)

            if user.role != role:
                return error_response(message, 403)

            g.current_user = user
            return f(*args, **kwargs)
        return decorated_function
    return decorator

def admin_required(f):
    """Decorator to require admin role."""
    return _role_required(UserRole.ADMIN, "Admin access required")(f)

def student_required(f):
    """Decorator to require student role."""
    return _role_required(UserRole.STUDENT, "Student access required")(f)
