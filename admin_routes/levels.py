"""
Level threshold routes for admins.
"""

from flask import Blueprint, jsonify
from flask_login import login_required
from decorators import admin_required
from route_utils import request_data
from services import catalog

bp = Blueprint('levels', __name__)


@bp.route('/levels')
@login_required
@admin_required
def levels_list():
    """Levels sorted by required XP, lowest first."""
    return jsonify([level.to_dict() for level in catalog.list_levels()])


@bp.route('/levels', methods=['POST'])
@login_required
@admin_required
def create_level():
    data = request_data()
    level = catalog.create_level(data.get('name'), data.get('xp_required'), data.get('reward'))
    return jsonify({'success': True, 'level': level.to_dict()}), 201


@bp.route('/levels/<int:level_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_level(level_id):
    catalog.delete_level(level_id)
    return jsonify({'success': True})
