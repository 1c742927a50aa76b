"""
Input coercion shared by the services and the JSON routes.
"""

from errors import InvalidInput

# Range of db.Integer (a 32-bit INTEGER column on PostgreSQL)
INT_MIN = -(2 ** 31 - 1)
INT_MAX = 2 ** 31 - 1


def require_int(value, field, minimum=None):
    """
    Coerce a JSON/form value to int or raise InvalidInput.
    Booleans are rejected even though they are ints in Python.
    """
    if value is None or value == '':
        raise InvalidInput(f'{field} is required')
    if isinstance(value, bool):
        raise InvalidInput(f'{field} must be a whole number')
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            raise InvalidInput(f'{field} must be a whole number')
    else:
        raise InvalidInput(f'{field} must be a whole number')

    if not INT_MIN <= number <= INT_MAX:
        raise InvalidInput(f'{field} is out of range')
    if minimum is not None and number < minimum:
        raise InvalidInput(f'{field} must be at least {minimum}')
    return number


def optional_int(value, field, minimum=None):
    if value is None or value == '':
        return None
    return require_int(value, field, minimum=minimum)


def require_text(value, field):
    if value is None or not str(value).strip():
        raise InvalidInput(f'{field} is required')
    return str(value).strip()


def parse_bool(value):
    """Accept real booleans and the strings a multipart form sends."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')
