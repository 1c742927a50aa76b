"""
Shared helpers for the JSON blueprints.
"""

from flask import request

from errors import InvalidInput


def request_data():
    """JSON object body, falling back to form fields for multipart/form posts."""
    data = request.get_json(silent=True)
    if data is None:
        return request.form
    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    return data


def uploaded_file(field='image'):
    """The uploaded file for a form field, or None when nothing was sent."""
    file = request.files.get(field)
    if file is None or not file.filename:
        return None
    return file
