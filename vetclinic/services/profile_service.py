# Profile service module: one account record, one profile variant per role
import logging
from .. import db
from ..models import Role, User
from . import owner_service, file_storage_service
from .user_service import EMAIL_REGEX

logger = logging.getLogger(__name__)


class AccountProfile:
    role = None
    editable_fields = {'fullName': 'full_name', 'email': 'email', 'mobile': 'mobile'}

    def __init__(self, user):
        self.user = user

    def to_dict(self):
        data = {
            'id': self.user.id,
            'username': self.user.username,
            'role': self.user.role.value,
            'profilePhoto': self.user.profile_photo
        }
        for key, attr in self.editable_fields.items():
            data[key] = getattr(self.user, attr)
        return data

    def apply(self, data):
        for key, attr in self.editable_fields.items():
            if key in data:
                setattr(self.user, attr, data[key])


class AdminProfile(AccountProfile):
    role = Role.ADMIN


class VeterinarianProfile(AccountProfile):
    role = Role.VETERINARIAN
    editable_fields = dict(AccountProfile.editable_fields,
                           specialization='specialization', workingHours='working_hours')


class OwnerProfile(AccountProfile):
    role = Role.OWNER
    editable_fields = dict(AccountProfile.editable_fields, address='address')

    def to_dict(self):
        data = super().to_dict()
        owner = owner_service.find_by_user_id(self.user.id)
        data['ownerId'] = owner.id if owner else None
        return data

    def apply(self, data):
        super().apply(data)
        owner = owner_service.find_by_user_id(self.user.id)
        if owner:
            owner.name = self.user.full_name
            owner.email = self.user.email
            owner.phone = self.user.mobile
            owner.address = self.user.address or owner.address


PROFILE_TYPES = {profile.role: profile for profile in (AdminProfile, VeterinarianProfile, OwnerProfile)}


def build_profile(user):
    return PROFILE_TYPES[user.role](user)


def get_profile(current_user_identity):
    user = db.session.get(User, current_user_identity['id'])
    if not user:
        return None, {'message': 'User not found'}, 404
    return build_profile(user).to_dict(), None, 200


def update_profile(current_user_identity, data):
    user = db.session.get(User, current_user_identity['id'])
    if not user:
        return None, {'message': 'User not found'}, 404
    if not data:
        return None, {'message': 'No data provided'}, 400
    if 'email' in data and data['email'] != user.email:
        if not EMAIL_REGEX.match(data['email'] or ''):
            return None, {'message': 'Invalid email format'}, 400
        if User.query.filter(User.email == data['email'], User.id != user.id).first():
            return None, {'message': 'Email already exists'}, 400
        owner_with_email = owner_service.find_by_email(data['email'])
        if owner_with_email and owner_with_email.user_id != user.id:
            return None, {'message': 'Email already exists'}, 400
    try:
        profile = build_profile(user)
        profile.apply(data)
        db.session.commit()
        logger.info(f"Profile updated for user {user.username}")
        return profile.to_dict(), None, 200
    except Exception as e:
        db.session.rollback()
        return None, {'message': 'Failed to update profile', 'error': str(e)}, 500


def update_photo(current_user_identity, photo):
    user = db.session.get(User, current_user_identity['id'])
    if not user:
        return None, {'message': 'User not found'}, 404
    stored, error = file_storage_service.store_file(photo, 'profile-photos')
    if error:
        return None, {'message': error}, 400
    old_photo = user.profile_photo
    user.profile_photo = stored
    db.session.commit()
    file_storage_service.delete_file(old_photo)
    return build_profile(user).to_dict(), None, 200
