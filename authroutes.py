# Core Flask imports
from flask import Blueprint, jsonify, request, current_app
from flask_login import login_user, logout_user, login_required, current_user

# Database and model imports
from models import User
from route_utils import request_data

# Application imports
from services import log_activity

# Werkzeug utilities
from werkzeug.security import check_password_hash

auth_blueprint = Blueprint('auth', __name__)


@auth_blueprint.route('/login', methods=['POST'])
def login():
    data = request_data()
    name = (data.get('name') or data.get('username') or '').strip()
    password = data.get('password') or ''

    if not name or not password:
        return jsonify({'success': False, 'error': 'invalid_input', 'message': 'Name and password are required.'}), 400

    user = User.query.filter_by(name=name).first()
    if not user:
        log_activity(
            user_id=None,
            action='login_failed',
            details={'name': name, 'reason': 'unknown_user'},
            ip_address=request.remote_addr,
            success=False,
            error_message='User does not exist',
        )
        return jsonify({'success': False, 'error': 'invalid_credentials', 'message': 'User does not exist.'}), 400

    if not check_password_hash(user.password_hash, password):
        log_activity(
            user_id=user.id,
            action='login_failed',
            details={'name': name, 'reason': 'wrong_password'},
            ip_address=request.remote_addr,
            success=False,
            error_message='Wrong password',
        )
        return jsonify({'success': False, 'error': 'invalid_credentials', 'message': 'Wrong password.'}), 400

    login_user(user)
    log_activity(
        user_id=user.id,
        action='login',
        details={'role': user.role},
        ip_address=request.remote_addr,
    )
    current_app.logger.info(f"User {user.id} logged in as {user.role}")

    return jsonify({
        'id': user.id,
        'name': user.name,
        'role': user.role,
        'class_id': user.class_id,
    })


@auth_blueprint.route('/logout', methods=['POST'])
@login_required
def logout():
    log_activity(user_id=current_user.id, action='logout', ip_address=request.remote_addr)
    logout_user()
    return jsonify({'success': True})
