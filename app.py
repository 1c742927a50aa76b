import logging
import os

from flask import Flask, jsonify

from config import ProductionConfig, DevelopmentConfig, TestingConfig

# Import extensions to avoid circular imports
from extensions import db, login_manager, migrate

# Import models here so db.create_all() sees every table
from models import User
from error_handler import register_error_handlers, error_response
from storage import init_storage


def configure_logging(app):
    """Apply LOG_LEVEL to the app logger and to the module loggers."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    app.logger.setLevel(level)


def create_app(config_class=None):
    """
    Factory function to create the Flask application.
    Automatically selects configuration based on environment.
    """
    if config_class is None:
        env = os.environ.get('FLASK_ENV', 'production').lower()
        if env == 'development':
            config_class = DevelopmentConfig
        elif env == 'testing':
            config_class = TestingConfig
        else:
            config_class = ProductionConfig  # Default to production for security

    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    # Initialize extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    init_storage(app)

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') and ':memory:' not in app.config['SQLALCHEMY_DATABASE_URI']:
        os.makedirs(app.instance_path, exist_ok=True)

    with app.app_context():
        try:
            db.create_all()
            app.logger.info("Database tables created successfully")
        except Exception as e:
            app.logger.error(f"FATAL DATABASE ERROR DURING INITIALIZATION: {e}")
            raise

    # User loader function for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return error_response('unauthorized', 'Please log in first.', 401)

    # Import and register blueprints
    from authroutes import auth_blueprint
    from studentroutes import student_blueprint
    from admin_routes import admin_blueprint

    app.register_blueprint(auth_blueprint)
    app.register_blueprint(student_blueprint, url_prefix='/student')
    app.register_blueprint(admin_blueprint, url_prefix='/admin')

    register_error_handlers(app)

    @app.route('/health')
    def health():
        gateway = app.extensions['object_storage']
        return jsonify({'success': True, 'uploads_enabled': gateway.enabled})

    return app
