"""
Flask extension singletons. Kept apart from app.py to avoid circular imports
between the factory, the models and the blueprints.
"""

from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
