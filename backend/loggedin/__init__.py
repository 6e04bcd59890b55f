"""LoggedIn Student Check-in - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from loggedin.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'LoggedIn Check-in',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from loggedin.api.auth import auth_bp
    from loggedin.api.events import events_bp
    from loggedin.api.attendance import attendance_bp
    from loggedin.api.admin import admin_bp

    # Auth
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Core Features
    app.register_blueprint(events_bp, url_prefix='/api/events')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')

    # Admin Review
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from loggedin.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(400)
    def bad_request(error):
        return handle_error(error, 400)

    @app.errorhandler(401)
    def unauthorized(error):
        return handle_error(error, 401)

    @app.errorhandler(403)
    def forbidden(error):
        return handle_error(error, 403)

    @app.errorhandler(404)
    def not_found(error):
        return handle_error(error, 404)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error(error, 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    log_level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    logging.getLogger('loggedin').setLevel(log_level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger('loggedin').addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('LoggedIn check-in startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from loggedin.models import (
            User, UserRole,
            Event, AttendanceRecord, SecurityLog, AbsenceReport
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('create-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def create_db(drop):
        """Create database tables."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('drop-db')
    def drop_db():
        """Drop all database tables."""
        if click.confirm('Are you sure you want to drop all tables?'):
            db.drop_all()
            click.echo('Database tables dropped.')

    @app.cli.command('seed-events')
    def seed_events():
        """Seed database with sample events."""
        from loggedin.services.event_service import EventService, EventError

        try:
            events = EventService.seed_sample_events()
            click.echo(f'Seeded {len(events)} sample events.')
        except EventError as e:
            click.echo(f'Error seeding events: {e.message}')

    @app.cli.command('create-admin')
    def create_admin():
        """Create admin user."""
        email = click.prompt('Admin email')
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)

        from loggedin.services.auth_service import AuthService

        result, error = AuthService.create_admin(email, password)
        if error:
            click.echo(f'Error creating admin: {error}')
        else:
            click.echo(f"Admin user created: {result['email']}")
