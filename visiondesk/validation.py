"""Request payload validation helpers. Each raises ValidationError."""
import re
from datetime import date

from flask import request
from flask_babel import gettext as _

from visiondesk.errors import ValidationError


def is_valid_email(email):
    """Standard email regex validation."""
    regex = r'^[^\s@]+@[^\s@]+\.[^\s@]+$'
    return isinstance(email, str) and re.match(regex, email) is not None


def is_strong_password(password):
    """At least 8 chars, 1 uppercase, 1 number or special char."""
    if not isinstance(password, str) or len(password) < 8:
        return False
    if not re.search(r"[A-Z]", password):
        return False
    if not re.search(r"[\d\W]", password):
        return False
    return True


def get_json():
    """The request body as a dict; an absent body is an empty dict."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(_('Request body must be a JSON object.'))
    return data


def require_fields(data, *fields):
    missing = [f for f in fields if data.get(f) is None or (isinstance(data.get(f), str) and not data.get(f).strip())]
    if missing:
        raise ValidationError(_('Missing required fields: %(fields)s.', fields=', '.join(missing)))


def parse_text(value, field, required=True):
    """A stripped string; None passes through for optional fields."""
    if value is None and not required:
        return None
    if not isinstance(value, str):
        raise ValidationError(_('%(field)s must be a string.', field=field))
    value = value.strip()
    if required and not value:
        raise ValidationError(_('Missing required fields: %(fields)s.', fields=field))
    return value


def check_email(email):
    if not is_valid_email(email):
        raise ValidationError(_('Invalid email.'))
    return email.strip().lower()


def check_password(password):
    if not is_strong_password(password):
        raise ValidationError(_('Password must be at least 8 characters long and contain an uppercase letter and a number or symbol.'))
    return password


def parse_choice(value, choices, field):
    if value not in choices:
        raise ValidationError(_('%(field)s must be one of: %(choices)s.',
                                field=field, choices=', '.join(choices)))
    return value


def parse_int(value, field, minimum=None, maximum=None):
    """Whole numbers only: ints, whole floats and digit strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and re.fullmatch(r'\s*-?\d+\s*', value):
        number = int(value)
    else:
        raise ValidationError(_('%(field)s must be an integer.', field=field))

    if minimum is not None and maximum is not None:
        if not minimum <= number <= maximum:
            raise ValidationError(_('%(field)s must be between %(minimum)s and %(maximum)s.',
                                    field=field, minimum=minimum, maximum=maximum))
    elif minimum is not None and number < minimum:
        raise ValidationError(_('%(field)s must be at least %(minimum)s.', field=field, minimum=minimum))
    elif maximum is not None and number > maximum:
        raise ValidationError(_('%(field)s must be at most %(maximum)s.', field=field, maximum=maximum))
    return number


def parse_optional_id(value, field):
    if value is None or value == '':
        return None
    return parse_int(value, field, minimum=1)


def parse_bool(value, field):
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    raise ValidationError(_('%(field)s must be true or false.', field=field))


def parse_date(value, field):
    """Accept ``YYYY-MM-DD`` or an ISO timestamp; empty means no date."""
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        raise ValidationError(_('%(field)s must be a date (YYYY-MM-DD).', field=field))
