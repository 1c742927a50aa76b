"""
Business logic and services. Keeps app.py as glue-only (config, blueprints, extensions).
"""

from .activity_log import log_activity
from .onboarding import ensure_onboarded, reset_onboarding, OnboardingResult
from .progression import (
    XpTarget,
    GrantResult,
    apply_xp,
    grant_xp_to_student,
    grant_xp_to_class,
    grant_xp_to_students,
    current_level,
    level_progress,
    select_level,
)
from .mission_completion import (
    ProofSubmission,
    submit_proof,
    list_uploads,
    list_uploads_for_student,
)

__all__ = [
    'log_activity',
    'ensure_onboarded',
    'reset_onboarding',
    'OnboardingResult',
    'XpTarget',
    'GrantResult',
    'apply_xp',
    'grant_xp_to_student',
    'grant_xp_to_class',
    'grant_xp_to_students',
    'current_level',
    'level_progress',
    'select_level',
    'ProofSubmission',
    'submit_proof',
    'list_uploads',
    'list_uploads_for_student',
]
