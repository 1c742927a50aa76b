import enum
from datetime import datetime

from flask_login import UserMixin

from extensions import db

ROLE_STUDENT = 'student'
ROLE_ADMIN = 'admin'


class OnboardingStatus(enum.Enum):
    """
    Derived from the nullable character/traits/items columns on User.
    Never stored; the columns remain the source of truth.
    """
    NOT_STARTED = 'not_started'
    AWAITING_CHARACTER = 'awaiting_character'  # traits/items drawn, character catalog was empty
    COMPLETED = 'completed'


class Class(db.Model):
    """
    A school class. Owns zero or more students.
    """
    __tablename__ = 'class'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    students = db.relationship('User', backref='class_info', lazy='dynamic')

    def to_dict(self, with_counts=False):
        data = {'id': self.id, 'name': self.name}
        if with_counts:
            data['student_count'] = self.students.filter_by(role=ROLE_STUDENT).count()
        return data

    def __repr__(self):
        return f"Class('{self.name}')"


class User(db.Model, UserMixin):
    """
    Login account for students and admins. Students additionally carry their
    progression state (xp, highest_xp) and their onboarding assignment
    (character, traits, items). Only the progression and onboarding services
    write those columns.
    """
    __tablename__ = 'user'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_STUDENT)  # 'student' or 'admin'
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=True)

    # Progression
    xp = db.Column(db.Integer, default=0, nullable=False)
    highest_xp = db.Column(db.Integer, default=0, nullable=False)  # watermark, never decreases

    # Onboarding, either all set or all unset
    character_id = db.Column(db.Integer, db.ForeignKey('character.id'), nullable=True)
    traits = db.Column(db.JSON(none_as_null=True), nullable=True)
    items = db.Column(db.JSON(none_as_null=True), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    character = db.relationship('Character', lazy=True)

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    @property
    def is_student(self):
        return self.role == ROLE_STUDENT

    @property
    def onboarding_status(self):
        if self.traits is None or self.items is None:
            return OnboardingStatus.NOT_STARTED
        if self.character_id is None:
            return OnboardingStatus.AWAITING_CHARACTER
        return OnboardingStatus.COMPLETED

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'role': self.role,
            'class_id': self.class_id,
            'xp': self.xp,
            'highest_xp': self.highest_xp,
            'character_id': self.character_id,
            'traits': self.traits or [],
            'items': self.items or [],
        }

    def __repr__(self):
        return f"User('{self.name}', '{self.role}')"


class Character(db.Model):
    """
    Pool from which onboarding draws one character per student.
    """
    __tablename__ = 'character'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'image_url': self.image_url}

    def __repr__(self):
        return f"Character('{self.name}')"


class Mission(db.Model):
    """
    Admin-defined task with a fixed XP reward. Create/delete only, the reward
    is never edited once a grant may have referenced it.
    """
    __tablename__ = 'mission'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True, default='')
    xp_reward = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(500), nullable=True)
    requires_upload = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description or '',
            'xp_reward': self.xp_reward,
            'image_url': self.image_url,
            'requires_upload': self.requires_upload,
        }

    def __repr__(self):
        return f"Mission('{self.title}', XP: {self.xp_reward})"


class BonusCard(db.Model):
    """
    Redeemable reward card. Catalog entry only.
    """
    __tablename__ = 'bonus_card'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    text = db.Column(db.Text, nullable=True)
    xp_cost = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'text': self.text,
            'xp_cost': self.xp_cost,
            'image_url': self.image_url,
        }

    def __repr__(self):
        return f"BonusCard('{self.title}')"


class Level(db.Model):
    """
    Named XP threshold. A student's current level is derived on demand and
    never stored on the student.
    """
    __tablename__ = 'level'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    xp_required = db.Column(db.Integer, nullable=False, default=0)
    reward = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'xp_required': self.xp_required,
            'reward': self.reward,
        }

    def __repr__(self):
        return f"Level('{self.name}', XP: {self.xp_required})"


class StudentUpload(db.Model):
    """
    Proof of mission completion. Only written after the object store
    accepted the file, so file_url is never null.
    """
    __tablename__ = 'student_upload'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    mission_id = db.Column(db.Integer, db.ForeignKey('mission.id'), nullable=True)
    file_url = db.Column(db.String(500), nullable=False)
    filename = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student = db.relationship('User', backref=db.backref('uploads', lazy='dynamic'))
    mission = db.relationship('Mission', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'mission_id': self.mission_id,
            'file_url': self.file_url,
            'filename': self.filename,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"StudentUpload(User: {self.user_id}, Mission: {self.mission_id})"


class XpTransaction(db.Model):
    """
    One row per student per applied XP grant. amount is the change actually
    applied to xp (after the floor at 0), so the rows of a student sum to
    their xp; requested_amount is what the grant asked for.
    """
    __tablename__ = 'xp_transaction'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    requested_amount = db.Column(db.Integer, nullable=False)
    mission_id = db.Column(db.Integer, db.ForeignKey('mission.id'), nullable=True)
    reason = db.Column(db.String(20), nullable=False, default='manual')  # 'manual' or 'mission'
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'amount': self.amount,
            'requested_amount': self.requested_amount,
            'mission_id': self.mission_id,
            'reason': self.reason,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"XpTransaction(User: {self.user_id}, Amount: {self.amount})"


class ActivityLog(db.Model):
    """
    Model for tracking user activities for auditing and security purposes.
    """
    __tablename__ = 'activity_log'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    action = db.Column(db.String(100), nullable=False)
    details = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    success = db.Column(db.Boolean, default=True)
    error_message = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"ActivityLog(User: {self.user_id}, Action: {self.action}, Success: {self.success})"
