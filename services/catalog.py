"""
Admin-managed catalogs and accounts: classes, students, missions, levels,
characters and bonus cards.

Catalog images go through the object store best-effort. If storage is off
or the write fails the entry is still created, just without an image.
"""

from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash
from werkzeug.utils import secure_filename

from extensions import db
from errors import Conflict, NotFound, StorageUnavailable
from models import (
    ActivityLog, BonusCard, Character, Class, Level, Mission, StudentUpload,
    User, XpTransaction, ROLE_ADMIN, ROLE_STUDENT,
)
from services.validation import optional_int, parse_bool, require_int, require_text
from storage import get_storage_gateway


def _get_or_404(model, object_id, label):
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFound(f'{label} {object_id} does not exist')
    return obj


def _commit_unique(message):
    """Commit, turning a unique-constraint violation into Conflict."""
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(message)


def store_catalog_image(image, prefix, gateway=None):
    """
    Upload an optional catalog image and return its URL, or None when there
    is no image or storage cannot take it.
    """
    if image is None or not getattr(image, 'filename', None):
        return None
    data = image.read()
    if not data:
        return None

    gateway = gateway or get_storage_gateway()
    key = f"{prefix}/{prefix}_{datetime.utcnow().strftime('%Y%m%d_%H%M%S_%f')}_{secure_filename(image.filename) or 'image'}"
    try:
        url = gateway.put(data, key, image.mimetype)
    except StorageUnavailable as e:
        current_app.logger.warning(f"{prefix} image upload failed, saving without image: {e.message}")
        return None
    if url is None:
        current_app.logger.warning(f"{prefix} image not stored, object storage is not configured")
    return url


# ---------------------------------------------------------------------------
# Classes
# ---------------------------------------------------------------------------

def create_class(name):
    name = require_text(name, 'name')
    if Class.query.filter_by(name=name).first():
        raise Conflict(f'Class "{name}" already exists')
    klass = Class(name=name)
    db.session.add(klass)
    _commit_unique(f'Class "{name}" already exists')
    return klass


def list_classes():
    return Class.query.order_by(Class.name.asc()).all()


def delete_class(class_id):
    """Delete a class; its students stay, detached from any class."""
    klass = _get_or_404(Class, class_id, 'Class')
    User.query.filter_by(class_id=klass.id).update({'class_id': None}, synchronize_session=False)
    db.session.delete(klass)
    db.session.commit()


# ---------------------------------------------------------------------------
# Students and admins
# ---------------------------------------------------------------------------

def _create_user(name, password, role, class_id=None):
    name = require_text(name, 'name')
    password = require_text(password, 'password')
    class_id = optional_int(class_id, 'class_id')
    if class_id is not None:
        _get_or_404(Class, class_id, 'Class')
    if User.query.filter_by(name=name).first():
        raise Conflict(f'User "{name}" already exists')

    user = User(
        name=name,
        password_hash=generate_password_hash(password),
        role=role,
        class_id=class_id,
        xp=0,
        highest_xp=0,
    )
    db.session.add(user)
    _commit_unique(f'User "{name}" already exists')
    return user


def create_student(name, password, class_id=None):
    return _create_user(name, password, ROLE_STUDENT, class_id)


def create_admin(name, password):
    return _create_user(name, password, ROLE_ADMIN)


def get_student(student_id):
    student = db.session.get(User, student_id)
    if student is None or student.role != ROLE_STUDENT:
        raise NotFound(f'Student {student_id} does not exist')
    return student


def list_students(class_id=None):
    query = User.query.filter_by(role=ROLE_STUDENT)
    if class_id is not None:
        query = query.filter_by(class_id=class_id)
    return query.order_by(User.name.asc()).all()


def delete_student(student_id):
    """Delete a student together with their uploads and XP history."""
    student = get_student(student_id)
    StudentUpload.query.filter_by(user_id=student.id).delete(synchronize_session=False)
    XpTransaction.query.filter_by(user_id=student.id).delete(synchronize_session=False)
    ActivityLog.query.filter_by(user_id=student.id).update({'user_id': None}, synchronize_session=False)
    db.session.delete(student)
    db.session.commit()


# ---------------------------------------------------------------------------
# Missions
# ---------------------------------------------------------------------------

def create_mission(title, xp, description=None, requires_upload=False, image=None, gateway=None):
    title = require_text(title, 'title')
    xp_reward = require_int(xp, 'xp', minimum=0)
    mission = Mission(
        title=title,
        description=description or '',
        xp_reward=xp_reward,
        requires_upload=parse_bool(requires_upload),
        image_url=store_catalog_image(image, 'mission', gateway),
    )
    db.session.add(mission)
    db.session.commit()
    return mission


def list_missions():
    return Mission.query.order_by(Mission.id.desc()).all()


def delete_mission(mission_id):
    """Delete a mission. Uploads and XP history keep their rows, unlinked."""
    mission = _get_or_404(Mission, mission_id, 'Mission')
    StudentUpload.query.filter_by(mission_id=mission.id).update({'mission_id': None}, synchronize_session=False)
    XpTransaction.query.filter_by(mission_id=mission.id).update({'mission_id': None}, synchronize_session=False)
    db.session.delete(mission)
    db.session.commit()


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

def create_level(name, xp_required, reward=None):
    level = Level(
        name=require_text(name, 'name'),
        xp_required=require_int(xp_required, 'xp_required', minimum=0),
        reward=reward or None,
    )
    db.session.add(level)
    db.session.commit()
    return level


def list_levels():
    return Level.query.order_by(Level.xp_required.asc(), Level.id.asc()).all()


def delete_level(level_id):
    level = _get_or_404(Level, level_id, 'Level')
    db.session.delete(level)
    db.session.commit()


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------

def create_character(name, image=None, gateway=None):
    character = Character(
        name=require_text(name, 'name'),
        image_url=store_catalog_image(image, 'character', gateway),
    )
    db.session.add(character)
    db.session.commit()
    return character


def list_characters():
    return Character.query.order_by(Character.id.desc()).all()


def delete_character(character_id):
    """Delete a character. Students holding it go back to awaiting a character."""
    character = _get_or_404(Character, character_id, 'Character')
    User.query.filter_by(character_id=character.id).update({'character_id': None}, synchronize_session=False)
    db.session.delete(character)
    db.session.commit()


# ---------------------------------------------------------------------------
# Bonus cards
# ---------------------------------------------------------------------------

def create_bonus_card(title, text=None, xp_cost=0, image=None, gateway=None):
    card = BonusCard(
        title=require_text(title, 'title'),
        text=text or None,
        xp_cost=require_int(xp_cost if xp_cost not in (None, '') else 0, 'xp_cost', minimum=0),
        image_url=store_catalog_image(image, 'bonus', gateway),
    )
    db.session.add(card)
    db.session.commit()
    return card


def list_bonus_cards():
    return BonusCard.query.order_by(BonusCard.id.desc()).all()


def delete_bonus_card(card_id):
    card = _get_or_404(BonusCard, card_id, 'Bonus card')
    db.session.delete(card)
    db.session.commit()
