# Prescription service module for business logic
import datetime
import logging
from ..models import Prescription, Appointment, AppointmentStatus, Pet, Role
from .. import db

logger = logging.getLogger(__name__)

PRESCRIPTION_APPOINTMENT_REASON = 'Prescription created'
CLINICAL_FIELDS = ('symptoms', 'diagnosis', 'medications')


def format_prescription(prescription):
    return {
        'id': prescription.id,
        'appointmentId': prescription.appointment_id,
        'petId': prescription.pet_id,
        'petName': prescription.pet.name if prescription.pet else None,
        'veterinarianId': prescription.veterinarian_id,
        'veterinarianName': prescription.veterinarian.full_name if prescription.veterinarian else None,
        'ownerId': prescription.owner_id,
        'ownerName': prescription.owner.full_name if prescription.owner else None,
        'symptoms': prescription.symptoms,
        'diagnosis': prescription.diagnosis,
        'medications': prescription.medications,
        'notes': prescription.notes,
        'date': prescription.date.isoformat()
    }


def can_view(prescription, current_user_identity):
    role = current_user_identity['role']
    if role == Role.ADMIN.value:
        return True
    if role == Role.VETERINARIAN.value:
        return prescription.veterinarian_id == current_user_identity['id']
    return prescription.owner_id == current_user_identity['id']


def _resolve_appointment(data, pet, current_user_identity):
    """The appointment a new prescription hangs off, completing or creating it."""
    appointment_id = data.get('appointmentId')
    if appointment_id:
        appointment = db.session.get(Appointment, appointment_id)
        if not appointment or appointment.veterinarian_id != current_user_identity['id']:
            return None, ({'message': 'Appointment not found'}, 404)
        if appointment.pet_id != pet.id:
            return None, ({'message': 'Appointment does not belong to this pet'}, 400)
        if appointment.status == AppointmentStatus.CANCELLED:
            return None, ({'message': 'Cannot prescribe for a cancelled appointment'}, 400)
        appointment.status = AppointmentStatus.COMPLETED
        return appointment, None

    appointment = Appointment(
        owner_id=pet.owner_id,
        pet_id=pet.id,
        veterinarian_id=current_user_identity['id'],
        date_time=datetime.datetime.now().replace(microsecond=0),
        reason=PRESCRIPTION_APPOINTMENT_REASON,
        status=AppointmentStatus.COMPLETED
    )
    db.session.add(appointment)
    db.session.flush()
    return appointment, None


def create_prescription(data, current_user_identity):
    if not data:
        return None, {'message': 'No data provided'}, 400
    missing = [field for field in ('petId',) + CLINICAL_FIELDS if not data.get(field)]
    if missing:
        return None, {'message': f"Missing required fields: {', '.join(missing)}"}, 400

    pet = db.session.get(Pet, data['petId'])
    if not pet:
        return None, {'message': 'Pet not found'}, 404
    if not pet.owner or not pet.owner.user_id:
        return None, {'message': 'Pet owner has no user account'}, 400

    try:
        appointment, failure = _resolve_appointment(data, pet, current_user_identity)
        if failure:
            db.session.rollback()
            return None, failure[0], failure[1]
        prescription = Prescription(
            appointment_id=appointment.id,
            pet_id=pet.id,
            veterinarian_id=current_user_identity['id'],
            owner_id=pet.owner.user_id,
            symptoms=data['symptoms'],
            diagnosis=data['diagnosis'],
            medications=data['medications'],
            notes=data.get('notes')
        )
        db.session.add(prescription)
        db.session.commit()
        logger.info(f"Prescription {prescription.id} created for pet {pet.id} on appointment {appointment.id}")
        return format_prescription(prescription), None, 201
    except Exception as e:
        db.session.rollback()
        return None, {'message': 'Error creating prescription', 'error': str(e)}, 500


def get_prescription(prescription_id, current_user_identity):
    prescription = db.session.get(Prescription, prescription_id)
    if not prescription:
        return None, {'message': 'Prescription not found'}, 404
    if not can_view(prescription, current_user_identity):
        return None, {'message': 'You are not authorized to view this prescription'}, 403
    return format_prescription(prescription), None, 200


def update_prescription(prescription_id, data, current_user_identity):
    prescription = db.session.get(Prescription, prescription_id)
    if not prescription:
        return None, {'message': 'Prescription not found'}, 404
    if prescription.veterinarian_id != current_user_identity['id']:
        return None, {'message': 'You can only edit your own prescriptions'}, 403
    if not data:
        return None, {'message': 'No data provided'}, 400
    for field in CLINICAL_FIELDS:
        if field in data and not data[field]:
            return None, {'message': f'{field.capitalize()} cannot be empty'}, 400
    prescription.symptoms = data.get('symptoms', prescription.symptoms)
    prescription.diagnosis = data.get('diagnosis', prescription.diagnosis)
    prescription.medications = data.get('medications', prescription.medications)
    prescription.notes = data.get('notes', prescription.notes)
    db.session.commit()
    return format_prescription(prescription), None, 200


def get_prescriptions_by_vet(current_user_identity):
    prescriptions = Prescription.query.filter_by(
        veterinarian_id=current_user_identity['id']
    ).order_by(Prescription.date.desc()).all()
    return [format_prescription(p) for p in prescriptions]


def get_prescriptions_by_owner(current_user_identity):
    prescriptions = Prescription.query.filter_by(
        owner_id=current_user_identity['id']
    ).order_by(Prescription.date.desc()).all()
    return [format_prescription(p) for p in prescriptions]


def get_prescriptions_by_appointment(appointment_id, current_user_identity):
    prescriptions = Prescription.query.filter_by(appointment_id=appointment_id).all()
    return [format_prescription(p) for p in prescriptions if can_view(p, current_user_identity)]


def get_all_prescriptions():
    return [format_prescription(p) for p in Prescription.query.order_by(Prescription.date.desc()).all()]


def delete_prescription(prescription_id):
    prescription = db.session.get(Prescription, prescription_id)
    if not prescription:
        return {'message': 'Prescription not found'}, 404
    db.session.delete(prescription)
    db.session.commit()
    logger.info(f"Prescription {prescription_id} deleted")
    return {'message': 'Prescription deleted'}, 200
