"""
Unit tests for first-login onboarding.
"""

import random

import pytest
from sqlalchemy import update

from errors import NotFound
from extensions import db
from models import OnboardingStatus, User
from services import catalog
from services.onboarding import (
    ITEMS,
    TRAITS,
    ensure_onboarded,
    reset_onboarding,
)


@pytest.fixture
def characters(ctx):
    return [catalog.create_character(name) for name in ('Owl', 'Fox', 'Golem')]


class TestEnsureOnboarded:

    def test_first_call_assigns_everything(self, ctx, characters):
        student = catalog.create_student('mia', 'pw')

        result = ensure_onboarded(student.id, rng=random.Random(1))

        assert result.already_done is False
        assert result.character.id in [c.id for c in characters]
        assert len(result.traits) == 3 and len(set(result.traits)) == 3
        assert len(result.items) == 3 and len(set(result.items)) == 3
        assert set(result.traits) <= set(TRAITS)
        assert set(result.items) <= set(ITEMS)

        student = db.session.get(User, student.id)
        assert student.onboarding_status is OnboardingStatus.COMPLETED
        assert student.character_id == result.character.id
        assert student.traits == result.traits
        assert student.items == result.items

    def test_second_call_does_not_reroll(self, ctx, characters):
        student = catalog.create_student('mia', 'pw')

        first = ensure_onboarded(student.id, rng=random.Random(1))
        second = ensure_onboarded(student.id, rng=random.Random(99))

        assert second.already_done is True
        assert second.character.id == first.character.id
        assert second.traits == first.traits
        assert second.items == first.items

    def test_same_seed_same_draw(self, ctx, characters):
        a = catalog.create_student('a', 'pw')
        b = catalog.create_student('b', 'pw')

        first = ensure_onboarded(a.id, rng=random.Random(42))
        second = ensure_onboarded(b.id, rng=random.Random(42))

        assert first.character.id == second.character.id
        assert first.traits == second.traits
        assert first.items == second.items

    def test_to_dict(self, ctx, characters):
        student = catalog.create_student('mia', 'pw')
        data = ensure_onboarded(student.id, rng=random.Random(3)).to_dict()

        assert data['skip'] is False
        assert data['character']['name'] in ('Owl', 'Fox', 'Golem')
        assert len(data['traits']) == 3
        assert len(data['items']) == 3

    def test_missing_student(self, ctx):
        with pytest.raises(NotFound):
            ensure_onboarded(404)

    def test_admin_is_not_onboarded(self, ctx, characters):
        admin = catalog.create_admin('root', 'pw')
        with pytest.raises(NotFound):
            ensure_onboarded(admin.id)


class TestEmptyCharacterPool:
    """Onboarding without characters still succeeds and completes later."""

    def test_traits_and_items_without_character(self, ctx):
        student = catalog.create_student('mia', 'pw')

        result = ensure_onboarded(student.id, rng=random.Random(5))

        assert result.already_done is False
        assert result.character is None
        assert len(result.traits) == 3
        assert len(result.items) == 3
        student = db.session.get(User, student.id)
        assert student.onboarding_status is OnboardingStatus.AWAITING_CHARACTER

    def test_repeat_call_while_pool_is_empty_writes_nothing(self, ctx):
        student = catalog.create_student('mia', 'pw')
        first = ensure_onboarded(student.id, rng=random.Random(5))

        again = ensure_onboarded(student.id, rng=random.Random(6))

        assert again.already_done is True
        assert again.character is None
        assert again.traits == first.traits
        assert again.items == first.items

    def test_character_is_assigned_once_pool_is_filled(self, ctx):
        student = catalog.create_student('mia', 'pw')
        first = ensure_onboarded(student.id, rng=random.Random(5))
        owl = catalog.create_character('Owl')

        completed = ensure_onboarded(student.id, rng=random.Random(6))

        assert completed.already_done is False
        assert completed.character.id == owl.id
        assert completed.traits == first.traits
        assert completed.items == first.items
        assert db.session.get(User, student.id).onboarding_status is OnboardingStatus.COMPLETED

        assert ensure_onboarded(student.id).already_done is True


class TestResetOnboarding:

    def test_reset_allows_a_new_draw(self, ctx, characters):
        student = catalog.create_student('mia', 'pw')
        ensure_onboarded(student.id, rng=random.Random(1))

        reset_onboarding(student.id)

        student = db.session.get(User, student.id)
        assert student.onboarding_status is OnboardingStatus.NOT_STARTED
        assert student.character_id is None
        assert ensure_onboarded(student.id).already_done is False

    def test_reset_missing_student(self, ctx):
        with pytest.raises(NotFound):
            reset_onboarding(404)

    def test_deleting_assigned_character_awaits_a_new_one(self, ctx, characters):
        student = catalog.create_student('mia', 'pw')
        result = ensure_onboarded(student.id, rng=random.Random(1))
        old_character_id = result.character.id

        catalog.delete_character(old_character_id)

        student = db.session.get(User, student.id)
        assert student.onboarding_status is OnboardingStatus.AWAITING_CHARACTER
        again = ensure_onboarded(student.id, rng=random.Random(2))
        assert again.already_done is False
        assert again.character.id != old_character_id
        assert again.traits == result.traits


class RacingRandom:
    """
    Random source that onboards the student itself on the first sample()
    call, the way a concurrent first-login request would between the status
    read and the compare-and-set write.
    """

    def __init__(self, student_id, character_id, traits, items, seed=0):
        self._random = random.Random(seed)
        self.student_id = student_id
        self.character_id = character_id
        self.traits = traits
        self.items = items
        self.raced = False

    def choice(self, seq):
        return self._random.choice(seq)

    def sample(self, population, k):
        if not self.raced:
            self.raced = True
            db.session.execute(
                update(User)
                .where(User.id == self.student_id)
                .values(character_id=self.character_id, traits=self.traits, items=self.items)
            )
            db.session.commit()
        return self._random.sample(population, k)


class TestConcurrentOnboarding:

    def test_first_writer_wins(self, ctx, characters):
        student = catalog.create_student('mia', 'pw')
        winner = characters[2]
        rng = RacingRandom(student.id, winner.id, TRAITS[:3], ITEMS[:3])

        result = ensure_onboarded(student.id, rng=rng)

        assert rng.raced
        assert result.already_done is True
        assert result.character.id == winner.id
        assert result.traits == TRAITS[:3]
        assert result.items == ITEMS[:3]

        student = db.session.get(User, student.id)
        assert student.character_id == winner.id
        assert student.traits == TRAITS[:3]
        assert student.items == ITEMS[:3]
