# Owner service module for business logic
import logging
import re
from .. import db
from ..models import Owner, Role

logger = logging.getLogger(__name__)

PHONE_REGEX = re.compile(r'^\d{10}$')
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$')


def format_owner(owner):
    return {
        'id': owner.id,
        'name': owner.name,
        'address': owner.address,
        'phone': owner.phone,
        'email': owner.email,
        'userId': owner.user_id,
        'petCount': len(owner.pets)
    }


def find_by_user_id(user_id):
    return Owner.query.filter_by(user_id=user_id).first()


def find_by_email(email):
    return Owner.query.filter_by(email=email).first()


def resolve_owner(current_user_identity):
    """Owner record behind the calling OWNER account, or None."""
    if current_user_identity.get('role') != Role.OWNER.value:
        return None
    return find_by_user_id(current_user_identity['id'])


def get_all_owners():
    return [format_owner(o) for o in Owner.query.order_by(Owner.name).all()]


def get_owner(owner_id):
    owner = db.session.get(Owner, owner_id)
    if not owner:
        return None, {'message': 'Owner not found'}, 404
    return format_owner(owner), None, 200


def validate_owner_data(data, owner_id=None):
    for field in ('name', 'address', 'email'):
        if not data.get(field):
            return f'{field.capitalize()} is required'
    if not EMAIL_REGEX.match(data['email']):
        return 'Please provide a valid email address'
    if data.get('phone') and not PHONE_REGEX.match(data['phone']):
        return 'Phone number must be 10 digits'
    existing = find_by_email(data['email'])
    if existing and existing.id != owner_id:
        return 'Email already exists'
    return None


def create_owner(data):
    if not data:
        return None, {'message': 'No data provided'}, 400
    error = validate_owner_data(data)
    if error:
        return None, {'message': error}, 400
    try:
        owner = Owner(
            name=data['name'],
            address=data['address'],
            phone=data.get('phone'),
            email=data['email'],
            user_id=data.get('userId')
        )
        db.session.add(owner)
        db.session.commit()
        logger.info(f"Created owner {owner.id} ({owner.email})")
        return format_owner(owner), None, 201
    except Exception as e:
        db.session.rollback()
        return None, {'message': 'Error creating owner', 'error': str(e)}, 500


def update_owner(owner_id, data):
    owner = db.session.get(Owner, owner_id)
    if not owner:
        return None, {'message': 'Owner not found'}, 404
    if not data:
        return None, {'message': 'No data provided'}, 400
    merged = {
        'name': data.get('name', owner.name),
        'address': data.get('address', owner.address),
        'email': data.get('email', owner.email),
        'phone': data.get('phone', owner.phone)
    }
    error = validate_owner_data(merged, owner_id=owner.id)
    if error:
        return None, {'message': error}, 400
    try:
        owner.name = merged['name']
        owner.address = merged['address']
        owner.email = merged['email']
        owner.phone = merged['phone']
        db.session.commit()
        return format_owner(owner), None, 200
    except Exception as e:
        db.session.rollback()
        return None, {'message': 'Error updating owner', 'error': str(e)}, 500


def delete_owner(owner_id):
    owner = db.session.get(Owner, owner_id)
    if not owner:
        return {'message': 'Owner not found'}, 404
    try:
        pet_count = len(owner.pets)
        db.session.delete(owner)
        db.session.commit()
        logger.info(f"Deleted owner {owner_id} and {pet_count} pet(s)")
        return {'message': 'Owner deleted successfully'}, 200
    except Exception as e:
        db.session.rollback()
        return {'message': 'Error deleting owner', 'error': str(e)}, 500
