"""Authentication API: institutional student login and admin login."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from loggedin import limiter
from loggedin.services.auth_service import AuthService
from loggedin.utils.helpers import success_response, error_response

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/verify-email", methods=["POST"])
def verify_email():
    """Check an email against the institutional domain gate."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get("email"):
        return error_response("Email is required", 400)

    is_valid, message = AuthService.verify_student_email(data["email"].strip())
    if not is_valid:
        return error_response(message, 403)

    return success_response(data={"valid": True}, message=message)

@auth_bp.route("/student-login", methods=["POST"])
@limiter.limit("5 per minute")
def student_login():
    """Student login with institutional email."""
    data = request.get_json(silent=True)

    if not isinstance(data, dict):
        return error_response("Request body must be JSON", 400)

    email = (data.get("email") or "").strip()
    if not email:
        return error_response("Email is required", 400)

    result, error = AuthService.student_login(email)

    if error:
        return error_response(error, 403 if error != "Login failed" else 500)

    return success_response(data=result, message="Login successful")

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Administrator login."""
    data = request.get_json(silent=True)

    if not isinstance(data, dict):
        return error_response("Request body must be JSON", 400)

    email = (data.get("email") or "").strip()
    password = data.get("password") or ""

    if not email or not password:
        return error_response("Email and password are required", 400)

    result, error = AuthService.admin_login(email, password)

    if error:
        return error_response(error, 401 if error != "Login failed" else 500)

    return success_response(data=result, message="Login successful")

@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    """Issue a new access token."""
    result, error = AuthService.refresh_token(get_jwt_identity())

    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Token refreshed")

@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def get_current_user():
    """Get current user profile."""
    user = AuthService.get_user_by_id(get_jwt_identity())

    if not user:
        return error_response("User not found", 404)

    return success_response(data=user.to_dict())
