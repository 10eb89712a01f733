# Appointment service module: booking, conflict detection and lifecycle
import datetime
import logging
from .. import db
from ..models import Appointment, AppointmentStatus, Owner, Pet, User, Role
from ..utils import parse_date_time
from . import owner_service, reminder_service

logger = logging.getLogger(__name__)

CONFLICT_WINDOW = datetime.timedelta(minutes=29)
BOOKING_CONFLICT_MESSAGE = ('This time slot is unavailable. Please choose a slot at least '
                            '30 minutes apart from existing appointments.')
RESCHEDULE_CONFLICT_MESSAGE = 'This time slot is unavailable. Please choose a different time.'


def format_appointment(appointment):
    pet = db.session.get(Pet, appointment.pet_id)
    owner = db.session.get(Owner, appointment.owner_id)
    vet = db.session.get(User, appointment.veterinarian_id)
    return {
        'id': appointment.id,
        'ownerId': appointment.owner_id,
        'ownerName': owner.name if owner else None,
        'petId': appointment.pet_id,
        'petName': pet.name if pet else None,
        'veterinarianId': appointment.veterinarian_id,
        'veterinarianName': vet.full_name if vet else None,
        'dateTime': appointment.date_time.isoformat(),
        'reason': appointment.reason,
        'status': appointment.status
    }


def group_appointments(appointments):
    grouped = {'upcoming': [], 'completed': [], 'cancelled': []}
    for appointment in appointments:
        if appointment.status == AppointmentStatus.SCHEDULED:
            grouped['upcoming'].append(format_appointment(appointment))
        elif appointment.status == AppointmentStatus.COMPLETED:
            grouped['completed'].append(format_appointment(appointment))
        else:
            grouped['cancelled'].append(format_appointment(appointment))
    return grouped


def find_conflicts(veterinarian_id, date_time, exclude_id=None):
    """Non-cancelled appointments of the vet within 29 minutes either side of ``date_time``."""
    query = Appointment.query.filter(
        Appointment.veterinarian_id == veterinarian_id,
        Appointment.date_time >= date_time - CONFLICT_WINDOW,
        Appointment.date_time <= date_time + CONFLICT_WINDOW,
        Appointment.status != AppointmentStatus.CANCELLED
    )
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)
    return query.all()


def _get_veterinarian(veterinarian_id):
    vet = db.session.get(User, veterinarian_id)
    if not vet or vet.role != Role.VETERINARIAN:
        return None
    return vet


def _notify_booking(appointment_id):
    try:
        reminder_service.send_immediate_confirmation(appointment_id)
    except Exception as e:
        logger.error(f"Could not queue confirmation emails for appointment {appointment_id}: {e}")


def book_appointment(data, current_user_identity):
    owner = owner_service.resolve_owner(current_user_identity)
    if not owner:
        return None, {'message': 'Owner profile not found'}, 404
    if not data:
        return None, {'message': 'No data provided'}, 400
    missing = [field for field in ('petId', 'veterinarianId', 'dateTime') if not data.get(field)]
    if missing:
        return None, {'message': f"Missing required fields: {', '.join(missing)}"}, 400

    pet = db.session.get(Pet, data['petId'])
    if not pet:
        return None, {'message': 'Pet not found'}, 404
    if pet.owner_id != owner.id:
        return None, {'message': 'You can only book appointments for your own pets'}, 403
    vet = _get_veterinarian(data['veterinarianId'])
    if not vet:
        return None, {'message': 'Veterinarian not found'}, 404
    try:
        date_time = parse_date_time(data['dateTime'])
    except ValueError as e:
        return None, {'message': str(e)}, 400

    if find_conflicts(vet.id, date_time):
        logger.info(f"Booking rejected: vet {vet.id} already busy around {date_time}")
        return None, {'message': BOOKING_CONFLICT_MESSAGE}, 409

    appointment = Appointment(
        owner_id=owner.id,
        pet_id=pet.id,
        veterinarian_id=vet.id,
        date_time=date_time,
        reason=data.get('reason'),
        status=AppointmentStatus.SCHEDULED
    )
    db.session.add(appointment)
    db.session.commit()
    logger.info(f"Appointment {appointment.id} booked for pet {pet.id} with vet {vet.id} at {date_time}")
    _notify_booking(appointment.id)
    return format_appointment(appointment), None, 201


def reschedule_appointment(appointment_id, data, current_user_identity):
    owner = owner_service.resolve_owner(current_user_identity)
    if not owner:
        return None, {'message': 'Owner profile not found'}, 404
    appointment = db.session.get(Appointment, appointment_id)
    if not appointment:
        return None, {'message': 'Appointment not found'}, 404
    if appointment.owner_id != owner.id:
        return None, {'message': 'You can only edit your own appointments'}, 403
    if appointment.status != AppointmentStatus.SCHEDULED:
        return None, {'message': 'Only scheduled appointments can be edited.'}, 400
    if not data:
        return None, {'message': 'No data provided'}, 400

    try:
        date_time = parse_date_time(data.get('dateTime') or appointment.date_time)
    except ValueError as e:
        return None, {'message': str(e)}, 400
    veterinarian_id = data.get('veterinarianId') or appointment.veterinarian_id
    if not _get_veterinarian(veterinarian_id):
        return None, {'message': 'Veterinarian not found'}, 404

    if find_conflicts(veterinarian_id, date_time, exclude_id=appointment.id):
        return None, {'message': RESCHEDULE_CONFLICT_MESSAGE}, 409

    appointment.date_time = date_time
    appointment.veterinarian_id = veterinarian_id
    if 'reason' in data:
        appointment.reason = data['reason']
    db.session.commit()
    logger.info(f"Appointment {appointment.id} rescheduled to {date_time} with vet {veterinarian_id}")
    return format_appointment(appointment), None, 200


def complete_appointment(appointment_id, current_user_identity):
    appointment = db.session.get(Appointment, appointment_id)
    if not appointment or appointment.veterinarian_id != current_user_identity['id']:
        return None, {'message': 'Appointment not found'}, 404
    if appointment.status != AppointmentStatus.SCHEDULED:
        return None, {'message': 'Appointment not found or not in scheduled state.'}, 400
    appointment.status = AppointmentStatus.COMPLETED
    db.session.commit()
    logger.info(f"Appointment {appointment.id} marked as completed")
    return format_appointment(appointment), None, 200


def cancel_appointment(appointment_id, current_user_identity):
    appointment = db.session.get(Appointment, appointment_id)
    if not appointment:
        return None, {'message': 'Appointment not found'}, 404
    role = current_user_identity['role']
    if role == Role.VETERINARIAN.value:
        allowed = appointment.veterinarian_id == current_user_identity['id']
    elif role == Role.OWNER.value:
        owner = owner_service.resolve_owner(current_user_identity)
        allowed = owner is not None and appointment.owner_id == owner.id
    else:
        allowed = role == Role.ADMIN.value
    if not allowed:
        return None, {'message': 'You are not allowed to cancel this appointment'}, 403
    if appointment.status != AppointmentStatus.SCHEDULED:
        return None, {'message': 'Only scheduled appointments can be cancelled.'}, 400
    appointment.status = AppointmentStatus.CANCELLED
    db.session.commit()
    logger.info(f"Appointment {appointment.id} cancelled by {current_user_identity['username']}")
    return format_appointment(appointment), None, 200


def get_owner_appointments(current_user_identity):
    owner = owner_service.resolve_owner(current_user_identity)
    if not owner:
        return None, {'message': 'Owner profile not found'}, 404
    appointments = Appointment.query.filter_by(owner_id=owner.id).order_by(Appointment.date_time).all()
    return group_appointments(appointments), None, 200


def get_vet_appointments(current_user_identity):
    appointments = Appointment.query.filter_by(
        veterinarian_id=current_user_identity['id']
    ).order_by(Appointment.date_time).all()
    return group_appointments(appointments)


def get_all_appointments():
    return group_appointments(Appointment.query.order_by(Appointment.date_time.desc()).all())


def get_calendar_events(appointments):
    """FullCalendar-style events for the SCHEDULED appointments."""
    events = []
    for appointment in appointments:
        if appointment.status != AppointmentStatus.SCHEDULED:
            continue
        pet = db.session.get(Pet, appointment.pet_id)
        owner = db.session.get(Owner, appointment.owner_id)
        events.append({
            'id': appointment.id,
            'title': f"{pet.name if pet else 'Pet'} - {owner.name if owner else 'Owner'}",
            'start': appointment.date_time.isoformat(),
            'description': appointment.reason or '',
            'status': appointment.status,
            'allDay': False
        })
    return events


def get_vet_calendar(current_user_identity):
    appointments = Appointment.query.filter_by(veterinarian_id=current_user_identity['id']).all()
    return get_calendar_events(appointments)
