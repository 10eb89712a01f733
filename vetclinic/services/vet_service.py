# Vet service module for business logic
import logging
from ..models import User, Role, Appointment, Prescription
from .. import db, bcrypt
from . import user_service

logger = logging.getLogger(__name__)


def format_vet(vet):
    return {
        'id': vet.id,
        'username': vet.username,
        'fullName': vet.full_name,
        'email': vet.email,
        'mobile': vet.mobile,
        'specialization': vet.specialization,
        'workingHours': vet.working_hours,
        'blocked': vet.blocked
    }


def _get(vet_id):
    vet = db.session.get(User, vet_id)
    if not vet:
        return None, ({'message': 'Veterinarian not found'}, 404)
    if vet.role != Role.VETERINARIAN:
        return None, ({'message': 'Not a veterinarian'}, 400)
    return vet, None


def get_all_vets():
    vets = User.query.filter_by(role=Role.VETERINARIAN).order_by(User.full_name).all()
    return [format_vet(v) for v in vets]


def get_vet_by_id(vet_id):
    vet, failure = _get(vet_id)
    if failure:
        return None, failure[0], failure[1]
    return format_vet(vet), None, 200


def create_vet(data):
    vet, error, status = user_service.register_user(data, role=Role.VETERINARIAN)
    if error:
        return None, error, status
    logger.info(f"Veterinarian {vet.username} created")
    return format_vet(vet), None, 201


def update_vet(vet_id, data):
    vet, failure = _get(vet_id)
    if failure:
        return None, failure[0], failure[1]
    if not data:
        return None, {'message': 'No data provided'}, 400
    if 'email' in data and data['email'] != vet.email:
        if User.query.filter(User.email == data['email'], User.id != vet.id).first():
            return None, {'message': 'Email already exists'}, 400
    if 'username' in data and data['username'] != vet.username:
        if User.query.filter(User.username == data['username'], User.id != vet.id).first():
            return None, {'message': 'Username already exists'}, 400
    if data.get('password') and not user_service.PASSWORD_REGEX.match(data['password']):
        return None, {'message': 'Password must be at least 6 characters and contain at least one letter and one number'}, 400
    try:
        vet.username = data.get('username', vet.username)
        vet.email = data.get('email', vet.email)
        vet.full_name = data.get('fullName', vet.full_name)
        vet.mobile = data.get('mobile', vet.mobile)
        vet.specialization = data.get('specialization', vet.specialization)
        vet.working_hours = data.get('workingHours', vet.working_hours)
        # blank password keeps the current one
        if (data.get('password') or '').strip():
            vet.password = bcrypt.generate_password_hash(data['password']).decode('utf-8')
        db.session.commit()
        return format_vet(vet), None, 200
    except Exception as e:
        db.session.rollback()
        return None, {'message': 'Failed to update vet', 'error': str(e)}, 500


def delete_vet(vet_id):
    vet, failure = _get(vet_id)
    if failure:
        return failure
    if (Appointment.query.filter_by(veterinarian_id=vet.id).first()
            or Prescription.query.filter_by(veterinarian_id=vet.id).first()):
        return {'message': 'Cannot delete veterinarian: Please remove or reassign all related '
                           'appointments and prescriptions first.'}, 400
    try:
        db.session.delete(vet)
        db.session.commit()
        logger.info(f"Veterinarian {vet_id} deleted")
        return {'message': 'Vet deleted'}, 200
    except Exception as e:
        db.session.rollback()
        return {'message': 'Failed to delete vet', 'error': str(e)}, 500
