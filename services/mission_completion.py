"""
Proof uploads for missions.

Policy when the object store cannot take the file (disabled or the write
failed): the submission is refused. No StudentUpload row is written and the
caller gets an explicit "not stored" result, the same on every call. This
workflow never grants XP; an admin grants the mission reward separately
once the proof has been reviewed.
"""

from datetime import datetime

from flask import current_app
from werkzeug.utils import secure_filename

from extensions import db
from errors import InvalidInput, NotFound, StorageUnavailable
from models import Mission, StudentUpload, User, ROLE_STUDENT
from storage import get_storage_gateway

STORAGE_REFUSED_MESSAGE = 'Uploads are currently unavailable, your proof was not saved. Please try again later.'


class ProofSubmission:
    """Result of submit_proof. stored is False when the file was refused."""

    def __init__(self, upload=None, file_url=None, stored=False, message=None):
        self.upload = upload
        self.file_url = file_url
        self.stored = stored
        self.message = message

    def to_dict(self):
        if not self.stored:
            return {
                'success': False,
                'error': StorageUnavailable.kind,
                'message': self.message,
                'file_url': None,
            }
        return {
            'success': True,
            'file_url': self.file_url,
            'upload': self.upload.to_dict(),
        }


def build_storage_key(filename, now=None):
    """uploads/upload_<UTC timestamp>_<filename>, unique per submission."""
    now = now or datetime.utcnow()
    safe_name = secure_filename(filename or '') or 'proof'
    return f"uploads/upload_{now.strftime('%Y%m%d_%H%M%S_%f')}_{safe_name}"


def submit_proof(student_id, mission_id, data, filename, mimetype=None, gateway=None):
    """
    Store a proof file and record it for the student.

    Raises InvalidInput for an empty file and NotFound for an unknown
    student or mission. Storage problems are returned, not raised.
    """
    if not data:
        raise InvalidInput('The uploaded file is empty')

    student = db.session.get(User, student_id)
    if student is None or student.role != ROLE_STUDENT:
        raise NotFound(f'Student {student_id} does not exist')

    mission = None
    if mission_id is not None:
        mission = db.session.get(Mission, mission_id)
        if mission is None:
            raise NotFound(f'Mission {mission_id} does not exist')

    gateway = gateway or get_storage_gateway()
    key = build_storage_key(filename)

    try:
        file_url = gateway.put(data, key, mimetype)
    except StorageUnavailable as e:
        current_app.logger.error(f"Proof upload for student {student.id} refused, storage write failed: {e.message}")
        return ProofSubmission(stored=False, message=STORAGE_REFUSED_MESSAGE)

    if not file_url:
        current_app.logger.warning(f"Proof upload for student {student.id} refused, object storage is not configured")
        return ProofSubmission(stored=False, message=STORAGE_REFUSED_MESSAGE)

    upload = StudentUpload(
        user_id=student.id,
        mission_id=mission.id if mission else None,
        file_url=file_url,
        filename=filename,
    )
    db.session.add(upload)
    db.session.commit()

    current_app.logger.info(f"Stored proof {key} for student {student.id} (mission={upload.mission_id})")
    return ProofSubmission(upload=upload, file_url=file_url, stored=True)


def list_uploads_for_student(student_id):
    student = db.session.get(User, student_id)
    if student is None or student.role != ROLE_STUDENT:
        raise NotFound(f'Student {student_id} does not exist')
    return (StudentUpload.query
            .filter_by(user_id=student.id)
            .order_by(StudentUpload.created_at.desc(), StudentUpload.id.desc())
            .all())


def list_uploads(mission_id=None, student_id=None):
    """All uploads for the admin review list, newest first."""
    query = StudentUpload.query
    if mission_id is not None:
        query = query.filter_by(mission_id=mission_id)
    if student_id is not None:
        query = query.filter_by(user_id=student_id)
    return query.order_by(StudentUpload.created_at.desc(), StudentUpload.id.desc()).all()
