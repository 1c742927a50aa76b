"""
XP grants and level derivation.

Every student is updated by a single UPDATE statement, so the new xp and the
highest_xp watermark are computed by the database from the same row version.
Class and list grants fan out over the students and commit each one on its
own: a missing student is reported and skipped, and updates already applied
to its siblings stay applied. There is deliberately no transaction spanning
several students.
"""

from flask import current_app
from sqlalchemy import case, select, update

from extensions import db
from errors import InvalidInput, NotFound
from models import Class, Level, Mission, User, XpTransaction, ROLE_STUDENT
from services.activity_log import log_activity
from services.validation import INT_MAX, require_int


class XpTarget:
    """Who a grant applies to: one student, a whole class or a list of students."""
    STUDENT = 'student'
    CLASS = 'class'
    STUDENTS = 'students'

    def __init__(self, kind, ref):
        if kind not in (self.STUDENT, self.CLASS, self.STUDENTS):
            raise ValueError(f"Unknown XP target kind: {kind}")
        self.kind = kind
        self.ref = ref

    @classmethod
    def student(cls, student_id):
        return cls(cls.STUDENT, student_id)

    @classmethod
    def klass(cls, class_id):
        return cls(cls.CLASS, class_id)

    @classmethod
    def students(cls, student_ids):
        return cls(cls.STUDENTS, list(student_ids))

    def __repr__(self):
        return f"XpTarget({self.kind}, {self.ref!r})"


class GrantResult:
    """Outcome of one grant: the amount applied, who got it, who did not."""

    def __init__(self, amount, mission=None):
        self.amount = amount
        self.mission_id = mission.id if mission is not None else None
        self.updated_ids = []
        self.failures = []

    def add_failure(self, student_id, error):
        self.failures.append({
            'student_id': student_id,
            'error': error.kind,
            'message': error.message,
        })

    def to_dict(self):
        return {
            'success': True,
            'amount': self.amount,
            'mission_id': self.mission_id,
            'updated': self.updated_ids,
            'failures': self.failures,
        }


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

def select_level(levels, xp):
    """
    Return the level with the largest xp_required that does not exceed xp,
    or None. On equal thresholds the first level in iteration order wins.
    """
    best = None
    for level in levels:
        if level.xp_required > xp:
            continue
        if best is None or level.xp_required > best.xp_required:
            best = level
    return best


def select_next_level(levels, xp):
    """Return the level with the smallest threshold above xp, or None."""
    upcoming = None
    for level in levels:
        if level.xp_required <= xp:
            continue
        if upcoming is None or level.xp_required < upcoming.xp_required:
            upcoming = level
    return upcoming


def _level_catalog():
    return Level.query.order_by(Level.xp_required.asc(), Level.id.asc()).all()


def current_level(student):
    """Current level for a student, recomputed from the catalog on every call."""
    return select_level(_level_catalog(), student.xp)


def level_progress(student):
    """Current and next level for the student dashboard."""
    levels = _level_catalog()
    level = select_level(levels, student.xp)
    upcoming = select_next_level(levels, student.xp)
    return {
        'level': level.to_dict() if level else None,
        'next_level': upcoming.to_dict() if upcoming else None,
        'xp_to_next_level': (upcoming.xp_required - student.xp) if upcoming else None,
    }


# ---------------------------------------------------------------------------
# Grants
# ---------------------------------------------------------------------------

def _resolve_reward(amount, mission_id):
    """
    A mission reference always wins over a caller-supplied amount, the reward
    comes from the catalog. A missing mission is fatal to the whole grant.
    """
    if mission_id is not None:
        mission_id = require_int(mission_id, 'mission_id')
        mission = db.session.get(Mission, mission_id)
        if mission is None:
            raise NotFound(f'Mission {mission_id} does not exist')
        return mission.xp_reward, mission
    return require_int(amount, 'amount'), None


def _apply_to_student(student_id, amount, mission=None):
    """
    xp := max(xp + amount, 0); highest_xp := max(highest_xp, new xp).

    The row is read FOR UPDATE first, so the transaction row can record the
    change actually applied after the floor. Both SET expressions read the
    pre-update row, so new_xp below is the post-update xp and the watermark
    is compared against it.
    """
    old_xp = db.session.execute(
        select(User.xp)
        .where(User.id == student_id, User.role == ROLE_STUDENT)
        .with_for_update()
    ).scalar_one_or_none()
    if old_xp is None:
        db.session.rollback()
        raise NotFound(f'Student {student_id} does not exist')
    if old_xp + amount > INT_MAX:
        db.session.rollback()
        raise InvalidInput(f'XP for student {student_id} would exceed {INT_MAX}')

    new_xp = case((User.xp + amount < 0, 0), else_=User.xp + amount)
    stmt = (
        update(User)
        .where(User.id == student_id, User.role == ROLE_STUDENT)
        .values(
            xp=new_xp,
            highest_xp=case((new_xp > User.highest_xp, new_xp), else_=User.highest_xp),
        )
        .execution_options(synchronize_session=False)
    )
    db.session.execute(stmt)

    db.session.add(XpTransaction(
        user_id=student_id,
        amount=max(old_xp + amount, 0) - old_xp,
        requested_amount=amount,
        mission_id=mission.id if mission is not None else None,
        reason='mission' if mission is not None else 'manual',
    ))
    db.session.commit()


def _fan_out(student_ids, result, mission=None):
    """Apply result.amount to each id independently. Duplicate ids are applied once."""
    seen = set()
    for raw_id in student_ids:
        try:
            student_id = require_int(raw_id, 'student_id')
        except InvalidInput as e:
            result.add_failure(raw_id, e)
            continue
        if student_id in seen:
            continue
        seen.add(student_id)

        try:
            _apply_to_student(student_id, result.amount, mission)
        except (NotFound, InvalidInput) as e:
            current_app.logger.warning(f"XP grant skipped student {student_id}: {e.message}")
            result.add_failure(student_id, e)
        else:
            result.updated_ids.append(student_id)
    return result


def _log_grant(target, result, granted_by):
    current_app.logger.info(
        f"Granted {result.amount} XP to {target} "
        f"(mission={result.mission_id}, updated={len(result.updated_ids)}, failed={len(result.failures)})"
    )
    log_activity(
        user_id=granted_by,
        action='xp_grant',
        details={
            'target': target.kind,
            'ref': target.ref,
            'amount': result.amount,
            'mission_id': result.mission_id,
            'updated': result.updated_ids,
            'failures': [f['student_id'] for f in result.failures],
        },
        success=not result.failures,
    )


def grant_xp_to_student(student_id, amount=None, mission_id=None, granted_by=None):
    """Grant XP to one student. A missing student raises NotFound."""
    amount, mission = _resolve_reward(amount, mission_id)
    student_id = require_int(student_id, 'student_id')
    result = GrantResult(amount, mission)
    _apply_to_student(student_id, amount, mission)
    result.updated_ids.append(student_id)
    _log_grant(XpTarget.student(student_id), result, granted_by)
    return result


def grant_xp_to_class(class_id, amount=None, mission_id=None, granted_by=None):
    """Grant XP to every student in the class at the moment of the call."""
    amount, mission = _resolve_reward(amount, mission_id)
    class_id = require_int(class_id, 'class_id')
    if db.session.get(Class, class_id) is None:
        raise NotFound(f'Class {class_id} does not exist')

    student_ids = [
        row.id for row in db.session.query(User.id)
        .filter(User.class_id == class_id, User.role == ROLE_STUDENT)
        .order_by(User.id)
    ]
    result = _fan_out(student_ids, GrantResult(amount, mission), mission)
    _log_grant(XpTarget.klass(class_id), result, granted_by)
    return result


def grant_xp_to_students(student_ids, amount=None, mission_id=None, granted_by=None):
    """Grant XP to a list of students. Failures are isolated per student."""
    if student_ids is None or isinstance(student_ids, (str, bytes, dict)):
        raise InvalidInput('student_ids must be a list')
    amount, mission = _resolve_reward(amount, mission_id)
    student_ids = list(student_ids)
    result = _fan_out(student_ids, GrantResult(amount, mission), mission)
    _log_grant(XpTarget.students(student_ids), result, granted_by)
    return result


def apply_xp(target, amount=None, mission_id=None, granted_by=None):
    """Dispatch a grant on its XpTarget."""
    if target.kind == XpTarget.STUDENT:
        return grant_xp_to_student(target.ref, amount, mission_id, granted_by)
    if target.kind == XpTarget.CLASS:
        return grant_xp_to_class(target.ref, amount, mission_id, granted_by)
    return grant_xp_to_students(target.ref, amount, mission_id, granted_by)
