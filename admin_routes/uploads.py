"""
Proof review list for admins.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required
from decorators import admin_required
from services import list_uploads
from services.validation import optional_int

bp = Blueprint('uploads', __name__)


@bp.route('/uploads')
@login_required
@admin_required
def uploads_list():
    uploads = list_uploads(
        mission_id=optional_int(request.args.get('mission_id'), 'mission_id'),
        student_id=optional_int(request.args.get('student_id'), 'student_id'),
    )
    return jsonify([u.to_dict() for u in uploads])
