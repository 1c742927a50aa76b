from functools import wraps
from flask import abort
from flask_login import current_user

from models import ROLE_ADMIN, ROLE_STUDENT


def admin_required(f):
    """Restricts access to users with the 'admin' role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)  # Unauthorized - not logged in
        if current_user.role != ROLE_ADMIN:
            abort(403)  # Forbidden - wrong role
        return f(*args, **kwargs)
    return decorated_function


def student_required(f):
    """Restricts access to students and admins acting on behalf of a student."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)  # Unauthorized - not logged in
        if current_user.role not in (ROLE_STUDENT, ROLE_ADMIN):
            abort(403)  # Forbidden - wrong role
        return f(*args, **kwargs)
    return decorated_function
