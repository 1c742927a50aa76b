"""
Admin Routes Package

This package contains all admin routes organized by functional area.
Each module focuses on one catalog or on XP grants.
"""

from flask import Blueprint

# Create the main admin blueprint
admin_blueprint = Blueprint('admin', __name__)

# Import all route modules to register their routes
from . import (
    classes,
    students,
    missions,
    levels,
    characters,
    bonus,
    xp,
    uploads,
)

# Register all blueprints with the main admin blueprint
admin_blueprint.register_blueprint(classes.bp, url_prefix='')
admin_blueprint.register_blueprint(students.bp, url_prefix='')
admin_blueprint.register_blueprint(missions.bp, url_prefix='')
admin_blueprint.register_blueprint(levels.bp, url_prefix='')
admin_blueprint.register_blueprint(characters.bp, url_prefix='')
admin_blueprint.register_blueprint(bonus.bp, url_prefix='')
admin_blueprint.register_blueprint(xp.bp, url_prefix='')
admin_blueprint.register_blueprint(uploads.bp, url_prefix='')
