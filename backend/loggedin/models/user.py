"""User model for authentication and authorization."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from loggedin import db
from loggedin.models.base import BaseModel

class UserRole(Enum):
    """User roles enumeration."""
    STUDENT = 'student'
    ADMIN = 'admin'

class User(BaseModel):
    """Students sign in with their institutional email; admins also hold a password."""

    __tablename__ = 'users'

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)
    failed_login_attempts = db.Column(db.Integer, default=0)

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def to_dict(self, exclude: list = None) -> dict:
        """Profile fields; credentials and lockout counters are never exposed."""
        return super().to_dict(exclude=(exclude or []) + ['password_hash', 'failed_login_attempts'])

    def __repr__(self) -> str:
        return f'<User {self.email}>'
