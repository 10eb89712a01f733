import logging
from flask import request, jsonify
from flask_jwt_extended import verify_jwt_in_request, get_jwt
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from vetclinic.models.user_model import Role

logger = logging.getLogger(__name__)

# URL prefix -> role allowed behind it
PROTECTED_PREFIXES = {
    '/owner': Role.OWNER,
    '/vet': Role.VETERINARIAN,
    '/admin': Role.ADMIN,
    '/api/reminders': Role.ADMIN,
}


def required_role_for(path):
    for prefix, role in PROTECTED_PREFIXES.items():
        if path == prefix or path.startswith(prefix + '/'):
            return role
    return None


def setup_auth_middleware(app):
    @app.before_request
    def before_request():
        if request.method == 'OPTIONS':
            return None
        required_role = required_role_for(request.path)
        if required_role is None:
            return None

        try:
            verify_jwt_in_request()
        except (JWTExtendedException, PyJWTError) as e:
            logger.info(f"Rejected unauthenticated request to {request.path}: {e}")
            return jsonify({'message': 'Authentication required', 'error': str(e)}), 401

        if get_jwt().get('role') != required_role.value:
            logger.warning(f"Role {get_jwt().get('role')} denied access to {request.path}")
            return jsonify({'message': 'Access denied'}), 403
        return None
