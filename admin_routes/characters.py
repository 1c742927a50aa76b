"""
Character pool routes for admins.
"""

from flask import Blueprint, jsonify
from flask_login import login_required
from decorators import admin_required
from route_utils import request_data, uploaded_file
from services import catalog

bp = Blueprint('characters', __name__)


@bp.route('/characters')
@login_required
@admin_required
def characters_list():
    return jsonify([c.to_dict() for c in catalog.list_characters()])


@bp.route('/characters', methods=['POST'])
@login_required
@admin_required
def create_character():
    data = request_data()
    character = catalog.create_character(
        data.get('name', data.get('title')),
        image=uploaded_file('image'),
    )
    return jsonify({'success': True, 'character': character.to_dict()}), 201


@bp.route('/characters/<int:character_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_character(character_id):
    catalog.delete_character(character_id)
    return jsonify({'success': True})
