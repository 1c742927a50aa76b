# Core Flask imports
from flask import Blueprint, request, abort, jsonify
from flask_login import login_required, current_user

# Authentication and decorators
from decorators import student_required

# Services
from route_utils import request_data
from errors import InvalidInput
from services import ensure_onboarded, level_progress, list_uploads_for_student, submit_proof
from services.catalog import get_student, list_levels, list_missions
from services.validation import optional_int

student_blueprint = Blueprint('student', __name__)


def resolve_student_id(raw_id):
    """
    Students act on their own id only. Admins may pass any student id.
    Without an id the logged-in user is meant.
    """
    student_id = optional_int(raw_id, 'user_id')
    if student_id is None:
        return current_user.id
    if not current_user.is_admin and student_id != current_user.id:
        abort(403)
    return student_id


@student_blueprint.route('/first-login', methods=['POST'])
@login_required
@student_required
def first_login():
    student_id = resolve_student_id(request_data().get('user_id'))
    result = ensure_onboarded(student_id)
    return jsonify(result.to_dict())


@student_blueprint.route('/me/<int:user_id>')
@login_required
@student_required
def me(user_id):
    student = get_student(resolve_student_id(user_id))
    data = student.to_dict()
    data['character'] = student.character.to_dict() if student.character else None
    data['class_name'] = student.class_info.name if student.class_info else None
    data['onboarding'] = student.onboarding_status.value
    data.update(level_progress(student))
    return jsonify(data)


@student_blueprint.route('/uploads/<int:user_id>')
@login_required
@student_required
def uploads(user_id):
    uploads = list_uploads_for_student(resolve_student_id(user_id))
    return jsonify([u.to_dict() for u in uploads])


@student_blueprint.route('/upload', methods=['POST'])
@login_required
@student_required
def upload_proof():
    if 'file' not in request.files:
        raise InvalidInput('No file selected')

    file = request.files['file']
    if file.filename == '':
        raise InvalidInput('No file selected')

    student_id = resolve_student_id(request.form.get('user_id'))
    mission_id = optional_int(request.form.get('mission_id'), 'mission_id')

    result = submit_proof(
        student_id,
        mission_id,
        file.read(),
        file.filename,
        file.mimetype,
    )
    return jsonify(result.to_dict()), (200 if result.stored else 503)


@student_blueprint.route('/missions')
@login_required
@student_required
def missions():
    return jsonify([m.to_dict() for m in list_missions()])


@student_blueprint.route('/levels')
@login_required
@student_required
def levels():
    return jsonify([level.to_dict() for level in list_levels()])
