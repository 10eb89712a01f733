# Pet service module for business logic
import logging
from ..models import Pet, Gender, Role, Owner
from .. import db
from ..utils import parse_date
from . import owner_service, file_storage_service

logger = logging.getLogger(__name__)

PET_IMAGE_DIRECTORY = 'pet-images'


def format_pet(pet):
    return {
        'id': pet.id,
        'name': pet.name,
        'species': pet.species,
        'breed': pet.breed,
        'dateOfBirth': pet.date_of_birth.isoformat() if pet.date_of_birth else None,
        'gender': pet.gender,
        'medicalHistory': pet.medical_history,
        'imageUrl': pet.image_url,
        'ownerId': pet.owner_id,
        'ownerName': pet.owner.name if pet.owner else None
    }


def check_pet_authorization(pet, current_user_identity):
    role_str = current_user_identity.get('role', '')
    try:
        current_user_role = Role(role_str)
    except ValueError:
        return False, "Invalid role"
    if current_user_role == Role.ADMIN:
        return True, None
    owner = owner_service.resolve_owner(current_user_identity)
    if owner and pet.owner_id == owner.id:
        return True, None
    return False, "No permission to modify pet"


def _apply_fields(pet, args):
    if args.get('name'):
        pet.name = args['name']
    if args.get('species'):
        pet.species = args['species']
    if 'breed' in args and args['breed'] is not None:
        pet.breed = args['breed']
    if args.get('dateOfBirth'):
        pet.date_of_birth = parse_date(args['dateOfBirth'])
    if args.get('gender'):
        gender = args['gender'].upper()
        if gender not in Gender.__members__:
            raise ValueError('Gender must be one of MALE, FEMALE, UNKNOWN')
        pet.gender = gender
    if 'medicalHistory' in args and args['medicalHistory'] is not None:
        pet.medical_history = args['medicalHistory']


def get_all_pets():
    pets = Pet.query.order_by(Pet.name).all()
    return [format_pet(p) for p in pets]


def get_pets_by_owner(current_user_identity):
    owner = owner_service.resolve_owner(current_user_identity)
    if not owner:
        return None, {'message': 'Owner profile not found'}, 404
    return [format_pet(p) for p in owner.pets], None, 200


def get_pet(pet_id, current_user_identity):
    pet = db.session.get(Pet, pet_id)
    if not pet:
        return None, {'message': 'Pet not found'}, 404
    if current_user_identity['role'] == Role.OWNER.value:
        authorized, error_message = check_pet_authorization(pet, current_user_identity)
        if not authorized:
            return None, {'message': error_message}, 403
    return format_pet(pet), None, 200


def create_pet(args, image, current_user_identity):
    if current_user_identity['role'] == Role.ADMIN.value and args.get('ownerId'):
        owner = db.session.get(Owner, args['ownerId'])
    else:
        owner = owner_service.resolve_owner(current_user_identity)
    if not owner:
        return None, {'message': 'Owner profile not found'}, 404

    missing = [field for field in ('name', 'species', 'dateOfBirth') if not args.get(field)]
    if missing:
        return None, {'message': f"Missing required fields: {', '.join(missing)}"}, 400

    pet = Pet(owner_id=owner.id, gender=Gender.UNKNOWN.value)
    try:
        _apply_fields(pet, args)
    except ValueError as e:
        return None, {'message': str(e)}, 400

    if image:
        stored, error = file_storage_service.store_file(image, PET_IMAGE_DIRECTORY)
        if error:
            return None, {'message': error}, 400
        pet.image_url = stored
    try:
        db.session.add(pet)
        db.session.commit()
        logger.info(f"Pet {pet.id} ({pet.name}) added for owner {owner.id}")
        return format_pet(pet), None, 201
    except Exception as e:
        db.session.rollback()
        return None, {'message': 'Error creating pet', 'error': str(e)}, 500


def update_pet(pet_id, args, image, current_user_identity):
    pet = db.session.get(Pet, pet_id)
    if not pet:
        return None, {'message': 'Pet not found'}, 404
    authorized, error_message = check_pet_authorization(pet, current_user_identity)
    if not authorized:
        return None, {'message': error_message}, 403
    try:
        _apply_fields(pet, args)
    except ValueError as e:
        db.session.rollback()
        return None, {'message': str(e)}, 400
    try:
        if image:
            stored, error = file_storage_service.store_file(image, PET_IMAGE_DIRECTORY)
            if error:
                db.session.rollback()
                return None, {'message': error}, 400
            file_storage_service.delete_file(pet.image_url)
            pet.image_url = stored
        db.session.commit()
        return format_pet(pet), None, 200
    except Exception as e:
        db.session.rollback()
        return None, {'message': 'Error updating pet', 'error': str(e)}, 500


def delete_pet(pet_id, current_user_identity):
    pet = db.session.get(Pet, pet_id)
    if not pet:
        return {'message': 'Pet not found'}, 404
    authorized, error_message = check_pet_authorization(pet, current_user_identity)
    if not authorized:
        return {'message': error_message}, 403
    try:
        image_url = pet.image_url
        db.session.delete(pet)
        db.session.commit()
        file_storage_service.delete_file(image_url)
        return {'message': 'Pet deleted'}, 200
    except Exception as e:
        db.session.rollback()
        return {'message': 'Error deleting pet', 'error': str(e)}, 500
