# User service module: registration, authentication and account administration
import datetime
import logging
import re
from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError
from .. import db, bcrypt
from ..models import User, Role, Owner
from ..utils.role_utils import get_user_data_with_permissions
from . import owner_service

logger = logging.getLogger(__name__)

PASSWORD_REGEX = re.compile(r'^(?=.*[A-Za-z])(?=.*\d).{6,}$')
EMAIL_REGEX = owner_service.EMAIL_REGEX


def format_user(user):
    return {
        'id': user.id,
        'username': user.username,
        'fullName': user.full_name,
        'email': user.email,
        'mobile': user.mobile,
        'role': user.role.value,
        'blocked': user.blocked
    }


def create_token_for(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={'username': user.username, 'role': user.role.value},
        expires_delta=datetime.timedelta(minutes=current_app.config.get('JWT_ACCESS_TOKEN_MINUTES', 60))
    )


def validate_registration(data):
    required_fields = ('username', 'email', 'password', 'fullName')
    missing = [field for field in required_fields if not data.get(field)]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    if not EMAIL_REGEX.match(data['email']):
        return 'Invalid email format'
    if not PASSWORD_REGEX.match(data['password']):
        return 'Password must be at least 6 characters and contain at least one letter and one number'
    if User.query.filter_by(username=data['username']).first():
        return 'Username already exists'
    if User.query.filter_by(email=data['email']).first():
        return 'Email already exists'
    return None


def register_user(data, role=Role.OWNER):
    """Create an account; OWNER accounts also get their linked Owner record."""
    if not data:
        return None, {'message': 'No data provided'}, 400
    error = validate_registration(data)
    if error:
        return None, {'message': error}, 400

    user = User(
        username=data['username'],
        email=data['email'],
        password=bcrypt.generate_password_hash(data['password']).decode('utf-8'),
        full_name=data['fullName'],
        mobile=data.get('mobile'),
        address=data.get('address'),
        specialization=data.get('specialization'),
        working_hours=data.get('workingHours'),
        role=role
    )
    try:
        db.session.add(user)
        db.session.flush()
        logger.info(f"[REGISTER_USER] username={user.username}, email={user.email}, role={role.value}")
        if role == Role.OWNER and not owner_service.find_by_user_id(user.id):
            if owner_service.find_by_email(user.email):
                db.session.rollback()
                return None, {'message': 'Email already exists'}, 400
            owner = Owner(
                name=user.full_name,
                email=user.email,
                phone=user.mobile,
                address=user.address or '',
                user_id=user.id
            )
            db.session.add(owner)
            logger.info(f"[REGISTER_OWNER] name={owner.name}, email={owner.email}, userId={user.id}")
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        logger.error(f"Registration failed for {data['username']}: {e}")
        return None, {'message': 'Database error: unable to register user'}, 500
    return user, None, 201


def authenticate(login, password):
    if not login or not password:
        return None, {'message': 'Missing required fields: username, password'}, 400
    user = User.query.filter((User.username == login) | (User.email == login)).first()
    if not user:
        return None, {'message': 'User not found'}, 404
    if user.blocked:
        return None, {'message': 'Your account is blocked. Please contact the clinic.'}, 403
    if not bcrypt.check_password_hash(user.password, password):
        return None, {'message': 'Invalid password'}, 401
    return user, None, 200


def get_user(user_id):
    return db.session.get(User, user_id)


def get_user_data(user_id):
    user = get_user(user_id)
    if not user:
        return None, {'message': 'User not found'}, 404
    return get_user_data_with_permissions(user), None, 200


def get_all_users():
    return [format_user(u) for u in User.query.order_by(User.id).all()]


def find_by_role(role):
    if isinstance(role, str):
        try:
            role = Role(role.upper())
        except ValueError:
            logger.error(f"Invalid role: {role}")
            return None
    users = User.query.filter_by(role=role).all()
    logger.info(f"Found {len(users)} users with role {role.value}")
    return users


def count_by_role(role):
    return User.query.filter_by(role=role).count()


def update_user(user_id, data):
    """Admin edit of account contact fields; role is left untouched."""
    user = get_user(user_id)
    if not user:
        return None, {'message': 'User not found'}, 404
    if not data:
        return None, {'message': 'No data provided'}, 400

    if 'email' in data and data['email'] != user.email:
        if not EMAIL_REGEX.match(data['email']):
            return None, {'message': 'Invalid email format'}, 400
        if User.query.filter(User.email == data['email'], User.id != user.id).first():
            return None, {'message': 'Email already exists'}, 400
    if 'username' in data and data['username'] != user.username:
        if User.query.filter(User.username == data['username'], User.id != user.id).first():
            return None, {'message': 'Username already exists'}, 400

    try:
        user.username = data.get('username', user.username)
        user.email = data.get('email', user.email)
        user.full_name = data.get('fullName', user.full_name)
        user.mobile = data.get('mobile', user.mobile)
        if user.role == Role.OWNER:
            user.address = data.get('address', user.address)
            owner = owner_service.find_by_user_id(user.id)
            if owner:
                owner.name = user.full_name
                owner.email = user.email
                owner.phone = user.mobile
                owner.address = user.address or owner.address
        db.session.commit()
        return format_user(user), None, 200
    except Exception as e:
        db.session.rollback()
        return None, {'message': 'Failed to update user', 'error': str(e)}, 500


def toggle_block(user_id, current_user_identity):
    user = get_user(user_id)
    if not user:
        return None, {'message': 'User not found'}, 404
    if user.id == current_user_identity['id']:
        return None, {'message': 'You cannot block your own account'}, 400
    user.blocked = not user.blocked
    db.session.commit()
    state = 'blocked' if user.blocked else 'unblocked'
    logger.info(f"User {user.username} has been {state}")
    return {'message': f'User {user.username} has been {state}', 'user': format_user(user)}, None, 200


def delete_user(user_id, current_user_identity):
    """Delete an account. An OWNER account takes its Owner record (and that owner's pets) with it."""
    user = get_user(user_id)
    if not user:
        return {'message': 'User not found'}, 404
    if user.id == current_user_identity['id']:
        return {'message': 'You cannot delete your own account.'}, 400
    try:
        if user.role == Role.OWNER:
            owner = owner_service.find_by_user_id(user.id) or owner_service.find_by_email(user.email)
            if owner:
                logger.debug(f"Deleting owner profile {owner.id} linked to user {user.id}")
                db.session.delete(owner)
        db.session.delete(user)
        db.session.commit()
        logger.info(f"Successfully deleted user: {user.username}")
        return {'message': 'User deleted successfully'}, 200
    except IntegrityError:
        db.session.rollback()
        return {'message': 'Cannot delete user: related appointments or prescriptions still reference this account'}, 400
    except Exception as e:
        db.session.rollback()
        return {'message': 'Failed to delete user', 'error': str(e)}, 500
