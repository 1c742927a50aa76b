"""
Bonus card routes for admins.
"""

from flask import Blueprint, jsonify
from flask_login import login_required
from decorators import admin_required
from route_utils import request_data, uploaded_file
from services import catalog

bp = Blueprint('bonus', __name__)


@bp.route('/bonus')
@login_required
@admin_required
def bonus_list():
    return jsonify([card.to_dict() for card in catalog.list_bonus_cards()])


@bp.route('/bonus', methods=['POST'])
@login_required
@admin_required
def create_bonus_card():
    data = request_data()
    card = catalog.create_bonus_card(
        title=data.get('title'),
        text=data.get('text'),
        xp_cost=data.get('xp_cost'),
        image=uploaded_file('image'),
    )
    return jsonify({'success': True, 'card': card.to_dict()}), 201


@bp.route('/bonus/<int:card_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_bonus_card(card_id):
    catalog.delete_bonus_card(card_id)
    return jsonify({'success': True})
