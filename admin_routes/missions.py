"""
Mission catalog routes for admins. Missions are create/delete only.
"""

from flask import Blueprint, jsonify
from flask_login import login_required
from decorators import admin_required
from route_utils import request_data, uploaded_file
from services import catalog

bp = Blueprint('missions', __name__)


@bp.route('/missions')
@login_required
@admin_required
def missions_list():
    return jsonify([m.to_dict() for m in catalog.list_missions()])


@bp.route('/missions', methods=['POST'])
@login_required
@admin_required
def create_mission():
    data = request_data()
    mission = catalog.create_mission(
        title=data.get('title'),
        xp=data.get('xp', data.get('xp_reward')),
        description=data.get('description'),
        requires_upload=data.get('requires_upload'),
        image=uploaded_file('image'),
    )
    return jsonify({'success': True, 'mission': mission.to_dict()}), 201


@bp.route('/missions/<int:mission_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_mission(mission_id):
    catalog.delete_mission(mission_id)
    return jsonify({'success': True})
