"""Configuration module for LoggedIn check-in."""
import os
from datetime import timedelta

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "https://*.vercel.app", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"

    # Identity
    INSTITUTIONAL_EMAIL_DOMAIN = os.environ.get('INSTITUTIONAL_EMAIL_DOMAIN') or '@sti.edu.ph'

    # Check-in
    GEOLOCATION_TIMEOUT_SECONDS = 5
    ALLOW_MANUAL_CHECKIN = True
    DEFAULT_GEOFENCE_RADIUS_METERS = 100

    # Dashboards
    RECENT_CHECKINS_LIMIT = 50
    SECURITY_LOGS_LIMIT = 100

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'

class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///loggedin_dev.db'
    SQLALCHEMY_ECHO = True
    LOG_LEVEL = 'DEBUG'

class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    # Enhanced security
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Stricter limits
    RATELIMIT_DEFAULT = "100 per day, 20 per hour"

    ALLOW_MANUAL_CHECKIN = os.environ.get('ALLOW_MANUAL_CHECKIN', 'true').lower() == 'true'
    LOG_FILE = os.environ.get('LOG_FILE') or '/app/logs/app.log'

class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    RATELIMIT_ENABLED = False
    LOG_LEVEL = 'WARNING'

# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

def get_config(config_name=None):
    """Get configuration by name."""
    return config.get(config_name or os.environ.get('FLASK_ENV', 'default'), DevelopmentConfig)
