import logging
from flask_restx import Namespace, Resource, fields, reqparse
from werkzeug.datastructures import FileStorage
from flask import request
from .. import db
from ..models import Role
from ..services import profile_service
from ..utils import role_required, current_identity

logger = logging.getLogger(__name__)

profile_ns = Namespace('profile', description='Own account profile', path='/profile')

profile_model = profile_ns.model('Profile', {
    'fullName': fields.String(description='Full name'),
    'email': fields.String(description='Email address'),
    'mobile': fields.String(description='Mobile number'),
    'address': fields.String(description='Address (owners)'),
    'specialization': fields.String(description='Specialization (veterinarians)'),
    'workingHours': fields.String(description='Working hours (veterinarians)')
})

photo_parser = reqparse.RequestParser()
photo_parser.add_argument('photo', type=FileStorage, location='files', required=True, help='Profile photo')


@profile_ns.route('')
class Profile(Resource):
    @role_required(Role.ADMIN, Role.VETERINARIAN, Role.OWNER)
    @profile_ns.doc('get_profile', security='BearerAuth')
    def get(self):
        data, error, status = profile_service.get_profile(current_identity())
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN, Role.VETERINARIAN, Role.OWNER)
    @profile_ns.expect(profile_model)
    @profile_ns.doc('update_profile', security='BearerAuth')
    def put(self):
        """Update the caller's profile; the role itself never changes here"""
        data, error, status = profile_service.update_profile(current_identity(), request.get_json(silent=True))
        if error:
            return error, status
        return {'message': 'Profile updated successfully', 'profile': data}, status


@profile_ns.route('/photo')
class ProfilePhoto(Resource):
    @role_required(Role.ADMIN, Role.VETERINARIAN, Role.OWNER)
    @profile_ns.expect(photo_parser)
    @profile_ns.doc('upload_profile_photo', security='BearerAuth')
    def post(self):
        args = photo_parser.parse_args()
        try:
            data, error, status = profile_service.update_photo(current_identity(), args['photo'])
        except Exception as e:
            db.session.rollback()
            logger.error(f"Profile photo upload failed: {e}")
            return {'message': 'Error uploading profile photo', 'error': str(e)}, 500
        if error:
            return error, status
        return {'message': 'Profile photo updated', 'profile': data}, status
