"""
XP grant routes for admins.

Manual grants take an amount from the request. Mission grants ignore any
amount and use the mission's stored reward. Batch grants report per-student
failures in the response instead of failing the whole request.
"""

from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from decorators import admin_required
from errors import InvalidInput
from route_utils import request_data
from services import grant_xp_to_class, grant_xp_to_student, grant_xp_to_students

bp = Blueprint('xp', __name__)


def _require(data, field):
    value = data.get(field)
    if value is None or value == '':
        raise InvalidInput(f'{field} is required')
    return value


@bp.route('/xp/student', methods=['POST'])
@login_required
@admin_required
def grant_student():
    data = request_data()
    result = grant_xp_to_student(
        _require(data, 'student_id'),
        amount=data.get('amount', data.get('xp')),
        granted_by=current_user.id,
    )
    return jsonify(result.to_dict())


@bp.route('/xp/class', methods=['POST'])
@login_required
@admin_required
def grant_class():
    data = request_data()
    result = grant_xp_to_class(
        _require(data, 'class_id'),
        amount=data.get('amount', data.get('xp')),
        granted_by=current_user.id,
    )
    return jsonify(result.to_dict())


@bp.route('/xp/mission-students', methods=['POST'])
@login_required
@admin_required
def grant_mission_students():
    data = request_data()
    if hasattr(data, 'getlist'):
        # form posts repeat the field once per student
        student_ids = data.getlist('student_ids')
    else:
        student_ids = _require(data, 'student_ids')
    result = grant_xp_to_students(
        student_ids,
        mission_id=_require(data, 'mission_id'),
        granted_by=current_user.id,
    )
    return jsonify(result.to_dict())


@bp.route('/xp/mission-class', methods=['POST'])
@login_required
@admin_required
def grant_mission_class():
    data = request_data()
    result = grant_xp_to_class(
        _require(data, 'class_id'),
        mission_id=_require(data, 'mission_id'),
        granted_by=current_user.id,
    )
    return jsonify(result.to_dict())
