# Dashboard service module: per-role summary counts
import datetime
from ..models import User, Role, Owner, Pet, Appointment, AppointmentStatus, Prescription
from . import owner_service, message_service, appointment_service


def _upcoming(query, limit=5):
    now = datetime.datetime.now()
    appointments = query.filter(
        Appointment.status == AppointmentStatus.SCHEDULED,
        Appointment.date_time >= now
    ).order_by(Appointment.date_time).limit(limit).all()
    return [appointment_service.format_appointment(a) for a in appointments]


def get_admin_dashboard(current_user_identity):
    return {
        'users': {role.value: User.query.filter_by(role=role).count() for role in Role},
        'owners': Owner.query.count(),
        'pets': Pet.query.count(),
        'appointments': {
            status: Appointment.query.filter_by(status=status).count() for status in AppointmentStatus.ALL
        },
        'prescriptions': Prescription.query.count(),
        'unreadMessages': message_service.count_unread(current_user_identity['id'])
    }


def get_vet_dashboard(current_user_identity):
    vet_id = current_user_identity['id']
    today = datetime.date.today()
    start = datetime.datetime.combine(today, datetime.time.min)
    end = datetime.datetime.combine(today, datetime.time.max)
    base = Appointment.query.filter(Appointment.veterinarian_id == vet_id)
    return {
        'todayAppointments': base.filter(
            Appointment.date_time >= start,
            Appointment.date_time <= end,
            Appointment.status == AppointmentStatus.SCHEDULED
        ).count(),
        'completedAppointments': base.filter(Appointment.status == AppointmentStatus.COMPLETED).count(),
        'prescriptions': Prescription.query.filter_by(veterinarian_id=vet_id).count(),
        'unreadMessages': message_service.count_unread(vet_id),
        'upcoming': _upcoming(base)
    }


def get_owner_dashboard(current_user_identity):
    owner = owner_service.resolve_owner(current_user_identity)
    if not owner:
        return None, {'message': 'Owner profile not found'}, 404
    base = Appointment.query.filter(Appointment.owner_id == owner.id)
    return {
        'ownerId': owner.id,
        'pets': len(owner.pets),
        'upcomingAppointments': base.filter(Appointment.status == AppointmentStatus.SCHEDULED).count(),
        'prescriptions': Prescription.query.filter_by(owner_id=current_user_identity['id']).count(),
        'unreadMessages': message_service.count_unread(current_user_identity['id']),
        'upcoming': _upcoming(base)
    }, None, 200
