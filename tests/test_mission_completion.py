"""
Unit tests for proof uploads.
"""

from datetime import datetime

import pytest

from errors import InvalidInput, NotFound
from extensions import db
from models import StudentUpload, User
from services import catalog
from services.mission_completion import (
    STORAGE_REFUSED_MESSAGE,
    build_storage_key,
    list_uploads,
    list_uploads_for_student,
    submit_proof,
)
from tests.conftest import FakeStorage


@pytest.fixture
def student(ctx):
    return catalog.create_student('mia', 'pw')


@pytest.fixture
def mission(ctx):
    return catalog.create_mission('Build a truth table', 30, requires_upload=True)


class TestBuildStorageKey:

    def test_timestamped_key(self):
        now = datetime(2024, 5, 1, 12, 30, 45, 123456)
        assert build_storage_key('my proof.png', now) == 'uploads/upload_20240501_123045_123456_my_proof.png'

    def test_path_components_are_stripped(self):
        key = build_storage_key('../../etc/passwd', datetime(2024, 5, 1))
        assert key.startswith('uploads/upload_')
        assert '..' not in key
        assert key.endswith('_etc_passwd')

    def test_missing_filename(self):
        assert build_storage_key('', datetime(2024, 5, 1)).endswith('_proof')


class TestSubmitProof:

    def test_stored_proof_is_recorded(self, ctx, storage, student, mission):
        result = submit_proof(student.id, mission.id, b'png-bytes', 'proof.png', 'image/png')

        assert result.stored is True
        assert result.file_url.startswith('https://cdn.example.test/proofs/uploads/upload_')
        assert storage.puts[0]['data'] == b'png-bytes'
        assert storage.puts[0]['mimetype'] == 'image/png'

        upload = StudentUpload.query.one()
        assert upload.user_id == student.id
        assert upload.mission_id == mission.id
        assert upload.file_url == result.file_url
        assert upload.filename == 'proof.png'
        assert result.to_dict()['success'] is True

    def test_proof_without_mission(self, ctx, student):
        result = submit_proof(student.id, None, b'data', 'notes.txt')
        assert result.stored is True
        assert StudentUpload.query.one().mission_id is None

    def test_upload_grants_no_xp(self, ctx, student, mission):
        submit_proof(student.id, mission.id, b'data', 'proof.png')
        assert db.session.get(User, student.id).xp == 0

    def test_empty_file_is_rejected(self, ctx, storage, student, mission):
        with pytest.raises(InvalidInput):
            submit_proof(student.id, mission.id, b'', 'proof.png')
        assert storage.puts == []
        assert StudentUpload.query.count() == 0

    def test_unknown_student(self, ctx, storage, mission):
        with pytest.raises(NotFound):
            submit_proof(404, mission.id, b'data', 'proof.png')
        assert storage.puts == []

    def test_unknown_mission(self, ctx, storage, student):
        with pytest.raises(NotFound):
            submit_proof(student.id, 404, b'data', 'proof.png')
        assert storage.puts == []


class TestStorageRefusal:
    """Disabled and failing storage are refused the same way, with no row."""

    @pytest.mark.parametrize('gateway', [
        FakeStorage(enabled=False),
        FakeStorage(fail=True),
    ], ids=['disabled', 'failing'])
    def test_refused(self, ctx, student, mission, gateway):
        result = submit_proof(student.id, mission.id, b'data', 'proof.png', gateway=gateway)

        assert result.stored is False
        assert result.upload is None
        assert result.to_dict() == {
            'success': False,
            'error': 'storage_unavailable',
            'message': STORAGE_REFUSED_MESSAGE,
            'file_url': None,
        }
        assert StudentUpload.query.count() == 0

    def test_refusal_is_consistent_across_calls(self, ctx, student, mission):
        gateway = FakeStorage(enabled=False)
        first = submit_proof(student.id, mission.id, b'data', 'a.png', gateway=gateway)
        second = submit_proof(student.id, mission.id, b'data', 'b.png', gateway=gateway)

        assert first.to_dict() == second.to_dict()
        assert StudentUpload.query.count() == 0


class TestListUploads:

    def test_lists_newest_first(self, ctx, student, mission):
        first = submit_proof(student.id, mission.id, b'1', 'one.png').upload
        second = submit_proof(student.id, None, b'2', 'two.png').upload

        assert [u.id for u in list_uploads_for_student(student.id)] == [second.id, first.id]
        assert [u.id for u in list_uploads(mission_id=mission.id)] == [first.id]

    def test_filters_by_student(self, ctx, student, mission):
        other = catalog.create_student('ben', 'pw')
        submit_proof(student.id, mission.id, b'1', 'one.png')
        submit_proof(other.id, mission.id, b'2', 'two.png')

        assert [u.user_id for u in list_uploads(student_id=other.id)] == [other.id]
        assert len(list_uploads()) == 2

    def test_unknown_student(self, ctx):
        with pytest.raises(NotFound):
            list_uploads_for_student(404)
