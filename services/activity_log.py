"""
Activity logging for auditing logins and XP grants.
"""

import json
from flask import current_app
from extensions import db
from models import ActivityLog


def log_activity(user_id, action, details=None, ip_address=None, success=True, error_message=None):
    """Log one activity entry. A failing audit write never breaks the caller."""
    try:
        log_entry = ActivityLog()
        log_entry.user_id = user_id
        log_entry.action = action
        log_entry.ip_address = ip_address
        log_entry.success = success
        log_entry.error_message = error_message
        if details:
            log_entry.details = json.dumps(details)
        db.session.add(log_entry)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to log activity: {str(e)}")

