# vetclinic/utils/util.py
from functools import wraps
from datetime import datetime, date
from dateutil.parser import isoparse
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from vetclinic import db
from vetclinic.models.user_model import User


def current_identity():
    """Identity of the authenticated caller, built from the verified JWT.

    Routes read this once and pass it to the services explicitly.
    """
    claims = get_jwt()
    return {
        'id': int(get_jwt_identity()),
        'username': claims.get('username'),
        'role': claims.get('role')
    }


def role_required(*roles):
    def wrapper(fn):
        @wraps(fn)
        @jwt_required()
        def decorator(*args, **kwargs):
            identity = current_identity()
            if identity['role'] not in [role.value for role in roles]:
                return {'message': 'Access denied'}, 403
            user = db.session.get(User, identity['id'])
            if not user:
                return {'message': 'User not found'}, 401
            if user.blocked:
                return {'message': 'Your account is blocked. Please contact the clinic.'}, 403
            return fn(*args, **kwargs)
        return decorator
    return wrapper


def parse_date_time(value):
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if not value or not isinstance(value, str):
        raise ValueError("Date and time are required. Use ISO format (YYYY-MM-DDTHH:MM)")
    try:
        parsed = isoparse(value)
    except (ValueError, OverflowError):
        raise ValueError("Invalid date format. Use ISO format (YYYY-MM-DDTHH:MM)")
    # Stored column is naive local clinic time
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.replace(tzinfo=None)


def parse_date(value):
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        raise ValueError("Date is required. Use ISO format (YYYY-MM-DD)")
    try:
        return isoparse(value).date()
    except (ValueError, OverflowError):
        raise ValueError("Invalid date format. Use ISO format (YYYY-MM-DD)")
