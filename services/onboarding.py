"""
First-login onboarding: one random character plus three traits and three
items per student, assigned once.

Repeat calls (the student page calls this on every load) must not re-roll.
The write is a compare-and-set on the still-empty columns, so when two
requests race the first writer wins and the second returns its values.
"""

import random

from flask import current_app
from sqlalchemy import update

from extensions import db
from errors import NotFound
from models import Character, OnboardingStatus, User, ROLE_STUDENT

TRAITS = [
    'Curious',
    'Persistent',
    'Logical',
    'Creative',
    'Patient',
    'Brave',
    'Precise',
    'Inventive',
    'Observant',
    'Calm',
    'Helpful',
    'Quick-witted',
]

ITEMS = [
    'Compass',
    'Lantern',
    'Notebook',
    'Magnifying Glass',
    'Rope',
    'Map Fragment',
    'Abacus',
    'Hourglass',
    'Key of Reason',
    'Quill',
    'Crystal Prism',
    'Star Chart',
]

TRAITS_PER_STUDENT = 3
ITEMS_PER_STUDENT = 3


class OnboardingResult:
    """Values assigned to the student and whether this call wrote nothing."""

    def __init__(self, character, traits, items, already_done):
        self.character = character
        self.traits = list(traits or [])
        self.items = list(items or [])
        self.already_done = already_done

    def to_dict(self):
        return {
            'character': self.character.to_dict() if self.character else None,
            'traits': self.traits,
            'items': self.items,
            'skip': self.already_done,
        }


def _draw_character(rng):
    characters = Character.query.order_by(Character.id).all()
    if not characters:
        return None
    return rng.choice(characters)


def draw_traits(rng=random):
    return rng.sample(TRAITS, TRAITS_PER_STUDENT)


def draw_items(rng=random):
    return rng.sample(ITEMS, ITEMS_PER_STUDENT)


def _get_student(student_id):
    student = db.session.get(User, student_id)
    if student is None or student.role != ROLE_STUDENT:
        raise NotFound(f'Student {student_id} does not exist')
    return student


def _stored_result(student, already_done=True):
    return OnboardingResult(student.character, student.traits, student.items, already_done)


def ensure_onboarded(student_id, rng=None):
    """
    Assign character, traits and items to a student unless already done.
    rng needs choice() and sample(); defaults to the random module.
    """
    rng = rng or random
    student = _get_student(student_id)
    status = student.onboarding_status

    if status is OnboardingStatus.COMPLETED:
        return _stored_result(student)

    character = _draw_character(rng)

    if status is OnboardingStatus.AWAITING_CHARACTER:
        # Traits and items were drawn while the character pool was empty.
        if character is None:
            return _stored_result(student)
        stmt = (
            update(User)
            .where(User.id == student.id, User.character_id.is_(None))
            .values(character_id=character.id)
            .execution_options(synchronize_session=False)
        )
        traits, items = student.traits, student.items
    else:
        traits = draw_traits(rng)
        items = draw_items(rng)
        stmt = (
            update(User)
            .where(User.id == student.id, User.character_id.is_(None), User.traits.is_(None))
            .values(
                character_id=character.id if character else None,
                traits=traits,
                items=items,
            )
            .execution_options(synchronize_session=False)
        )

    result = db.session.execute(stmt)
    db.session.commit()

    if result.rowcount == 0:
        # Another request onboarded this student in between, keep its draw.
        current_app.logger.info(f"Onboarding for student {student.id} already written by a concurrent request")
        db.session.refresh(student)
        return _stored_result(student)

    if character is None:
        current_app.logger.warning(
            f"Onboarded student {student.id} without a character, the character catalog is empty"
        )
    else:
        current_app.logger.info(f"Onboarded student {student.id} as character {character.id}")

    return OnboardingResult(character, traits, items, already_done=False)


def reset_onboarding(student_id):
    """Clear a student's assignment so the next login draws again (admin action)."""
    student = _get_student(student_id)
    student.character_id = None
    student.traits = None
    student.items = None
    db.session.commit()
    return student
