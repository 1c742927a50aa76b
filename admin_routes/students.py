"""
Student account routes for admins.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required
from decorators import admin_required
from route_utils import request_data
from services import catalog, reset_onboarding
from services.validation import optional_int

bp = Blueprint('students', __name__)


@bp.route('/students')
@login_required
@admin_required
def students_list():
    class_id = optional_int(request.args.get('class_id'), 'class_id')
    return jsonify([s.to_dict() for s in catalog.list_students(class_id)])


@bp.route('/students', methods=['POST'])
@login_required
@admin_required
def create_student():
    data = request_data()
    student = catalog.create_student(
        data.get('name'),
        data.get('password'),
        data.get('class_id'),
    )
    return jsonify({'success': True, 'student': student.to_dict()}), 201


@bp.route('/students/<int:student_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_student(student_id):
    catalog.delete_student(student_id)
    return jsonify({'success': True})


@bp.route('/students/<int:student_id>/reset-onboarding', methods=['POST'])
@login_required
@admin_required
def reset_student_onboarding(student_id):
    """Clear character, traits and items so the next login draws again."""
    student = reset_onboarding(student_id)
    return jsonify({'success': True, 'student': student.to_dict()})
