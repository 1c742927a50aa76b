"""
Class management routes for admins.
"""

from flask import Blueprint, jsonify
from flask_login import login_required
from decorators import admin_required
from route_utils import request_data
from services import catalog

bp = Blueprint('classes', __name__)


@bp.route('/classes')
@login_required
@admin_required
def classes_list():
    """All classes with their student counts."""
    return jsonify([c.to_dict(with_counts=True) for c in catalog.list_classes()])


@bp.route('/classes', methods=['POST'])
@login_required
@admin_required
def create_class():
    klass = catalog.create_class(request_data().get('name'))
    return jsonify({'success': True, 'class': klass.to_dict()}), 201


@bp.route('/classes/<int:class_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_class(class_id):
    catalog.delete_class(class_id)
    return jsonify({'success': True})
