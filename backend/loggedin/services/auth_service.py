"""Authentication service for students and administrators."""
from flask import current_app
from flask_jwt_extended import create_access_token, create_refresh_token
from loggedin import db
from loggedin.models.user import User, UserRole
from loggedin.utils.helpers import utcnow
from loggedin.utils.validators import Validator

class AuthService:
    @staticmethod
    def institutional_domain() -> str:
        return current_app.config.get('INSTITUTIONAL_EMAIL_DOMAIN', '@sti.edu.ph')

    @staticmethod
    def verify_student_email(email: str) -> tuple[bool, str]:
        """Apply the login domain gate. Returns (is_valid, message)."""
        if not email:
            return False, "Email is required"

        if '@' not in email:
            return False, "Please enter a valid email address"

        domain = AuthService.institutional_domain()
        if not Validator.is_institutional_email(email, domain):
            return False, f"Email must be an institutional email ({domain})"

        return True, "Valid institutional email"

    @staticmethod
    def _issue_tokens(user: User) -> dict:
        identity = str(user.id)
        return {
            "access_token": create_access_token(identity=identity, additional_claims={'role': user.role.value}),
            "refresh_token": create_refresh_token(identity=identity),
            "user": user.to_dict()
        }

    @staticmethod
    def student_login(email: str) -> tuple[dict, str]:
        """Sign a student in by institutional email, creating the account on first use."""
        try:
            email = (email or '').strip()
            is_valid, message = AuthService.verify_student_email(email)
            if not is_valid:
                return None, message

            user = User.query.filter_by(email=email).first()
            if user is None:
                user = User(email=email, role=UserRole.STUDENT)
                db.session.add(user)
            elif not user.is_student():
                return None, "Please use the admin login"
            elif not user.is_active:
                return None, "Account is deactivated"

            user.last_login = utcnow()
            db.session.commit()

            return AuthService._issue_tokens(user), None

        except Exception as e:
            db.session.rollback()
            current_app.logger.error("Student login failed for %s: %s", email, e)
            return None, "Login failed"

    @staticmethod
    def admin_login(email: str, password: str) -> tuple[dict, str]:
        """Authenticate an administrator and return tokens."""
        try:
            if not email or not password:
                return None, "Email and password are required"

            user = User.query.filter_by(email=email.lower().strip()).first()

            if not user or not user.is_admin():
                return None, "Invalid email or password"

            if not user.check_password(password):
                user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
                user.save()
                return None, "Invalid email or password"

            if not user.is_active:
                return None, "Account is deactivated"

            user.failed_login_attempts = 0
            user.last_login = utcnow()
            user.save()

            return AuthService._issue_tokens(user), None

        except Exception as e:
            db.session.rollback()
            current_app.logger.error("Admin login failed for %s: %s", email, e)
            return None, "Login failed"

    @staticmethod
    def create_admin(email: str, password: str) -> tuple[dict, str]:
        """Register a new administrator."""
        try:
            email = (email or '').lower().strip()
            if not Validator.validate_email(email):
                return None, "Invalid email format"

            result = Validator.validate_password(password)
            if not result['is_valid']:
                return None, result['errors'][0]

            if User.query.filter_by(email=email).first():
                return None, "Email already exists"

            user = User(email=email, role=UserRole.ADMIN)
            user.set_password(password)
            user.save()

            return user.to_dict(), None

        except Exception as e:
            db.session.rollback()
            return None, f"Registration failed: {str(e)}"

    @staticmethod
    def get_user_by_id(user_id) -> User:
        """Get user by JWT identity."""
        try:
            return User.get_by_id(int(user_id))
        except (TypeError, ValueError):
            return None

    @staticmethod
    def refresh_token(user_id) -> tuple[dict, str]:
        """Generate new access token."""
        user = AuthService.get_user_by_id(user_id)
        if not user or not user.is_active:
            return None, "User not found or inactive"

        access_token = create_access_token(identity=str(user.id), additional_claims={'role': user.role.value})

        return {
            "access_token": access_token,
            "user": user.to_dict()
        }, None
