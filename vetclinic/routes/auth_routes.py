from flask_restx import Namespace, Resource, fields
from flask import request, jsonify
from flask_jwt_extended import jwt_required, unset_jwt_cookies
from ..models import Role
from ..services import user_service
from ..utils import current_identity
from ..utils.role_utils import get_user_data_with_permissions

auth_ns = Namespace('auth', description='Authentication operations', tags=['Authentication'])

register_model = auth_ns.model('Register', {
    'username': fields.String(required=True, description='Username'),
    'email': fields.String(required=True, description='Email address'),
    'password': fields.String(required=True, description='Password'),
    'fullName': fields.String(required=True, description='Full name'),
    'mobile': fields.String(description='Mobile number'),
    'address': fields.String(description='Postal address')
})

login_model = auth_ns.model('Login', {
    'username': fields.String(required=True, description='Username or email'),
    'password': fields.String(required=True, description='Password')
})


@auth_ns.route('/roles')
class Roles(Resource):
    def get(self):
        return {'roles': [role.value for role in Role]}, 200


@auth_ns.route('/register')
class Register(Resource):
    @auth_ns.expect(register_model)
    def post(self):
        """Register a new pet owner account"""
        data = request.get_json(silent=True) or {}
        user, error, status = user_service.register_user(data)
        if error:
            return error, status
        return {
            'message': 'User registered successfully.',
            'access_token': user_service.create_token_for(user),
            'user': get_user_data_with_permissions(user)
        }, 201


@auth_ns.route('/login')
class Login(Resource):
    @auth_ns.expect(login_model)
    def post(self):
        """Log in with username or email"""
        data = request.get_json(silent=True) or {}
        user, error, status = user_service.authenticate(data.get('username') or data.get('email'), data.get('password'))
        if error:
            return error, status
        return {
            'message': 'Login successful.',
            'access_token': user_service.create_token_for(user),
            'user': get_user_data_with_permissions(user)
        }, 200


@auth_ns.route('/logout')
class Logout(Resource):
    @jwt_required()
    def post(self):
        response = jsonify({'message': 'Logout successful.'})
        unset_jwt_cookies(response)
        return response


@auth_ns.route('/verify')
class VerifyToken(Resource):
    @jwt_required()
    def get(self):
        """Check that the token is still valid"""
        data, error, status = user_service.get_user_data(current_identity()['id'])
        if error:
            return error, status
        if data['blocked']:
            return {'message': 'Your account is blocked. Please contact the clinic.'}, 403
        return {'message': 'Token is valid.', 'user': data}, 200
