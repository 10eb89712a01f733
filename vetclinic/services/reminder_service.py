# Reminder service module: daily appointment reminders and booking confirmations
import datetime
import logging
from sqlalchemy.exc import IntegrityError
from .. import db
from ..models import Appointment, AppointmentStatus, Owner, Pet, User, ReminderLog
from . import email_service

logger = logging.getLogger(__name__)


class ReminderData:
    """An appointment plus the names and addresses its emails need."""

    def __init__(self, appointment):
        self.appointment_id = appointment.id
        self.owner_id = appointment.owner_id
        self.veterinarian_id = appointment.veterinarian_id
        self.pet_id = appointment.pet_id
        self.date_time = appointment.date_time
        self.reason = appointment.reason
        self.status = appointment.status
        self.owner_name = None
        self.owner_email = None
        self.owner_phone = None
        self.veterinarian_name = None
        self.veterinarian_email = None
        self.veterinarian_phone = None
        self.pet_name = None
        self.pet_species = None

    def to_dict(self):
        return {
            'appointmentId': self.appointment_id,
            'ownerId': self.owner_id,
            'veterinarianId': self.veterinarian_id,
            'petId': self.pet_id,
            'dateTime': self.date_time.isoformat(),
            'reason': self.reason,
            'status': self.status,
            'ownerName': self.owner_name,
            'ownerEmail': self.owner_email,
            'ownerPhone': self.owner_phone,
            'veterinarianName': self.veterinarian_name,
            'veterinarianEmail': self.veterinarian_email,
            'veterinarianPhone': self.veterinarian_phone,
            'petName': self.pet_name,
            'petSpecies': self.pet_species
        }


def enrich_appointment(appointment):
    data = ReminderData(appointment)

    owner = db.session.get(Owner, appointment.owner_id)
    if owner:
        account = db.session.get(User, owner.user_id) if owner.user_id else None
        if account:
            data.owner_name = account.full_name
            data.owner_email = account.email
            data.owner_phone = account.mobile
        else:
            data.owner_name = owner.name
            data.owner_email = owner.email
            data.owner_phone = owner.phone
    else:
        logger.warning(f"Owner {appointment.owner_id} not found for appointment {appointment.id}")

    vet = db.session.get(User, appointment.veterinarian_id)
    if vet:
        data.veterinarian_name = vet.full_name
        data.veterinarian_email = vet.email
        data.veterinarian_phone = vet.mobile
    else:
        logger.warning(f"Veterinarian {appointment.veterinarian_id} not found for appointment {appointment.id}")

    pet = db.session.get(Pet, appointment.pet_id)
    if pet:
        data.pet_name = pet.name
        data.pet_species = pet.species
    return data


def get_appointment_reminder_data(appointment_id):
    appointment = db.session.get(Appointment, appointment_id)
    if not appointment:
        return None
    return enrich_appointment(appointment)


def get_appointments_for_date(date):
    """SCHEDULED appointments falling on ``date``, enriched for emailing."""
    start = datetime.datetime.combine(date, datetime.time.min)
    end = datetime.datetime.combine(date, datetime.time(23, 59, 59))
    appointments = Appointment.query.filter(
        Appointment.date_time >= start,
        Appointment.date_time <= end,
        Appointment.status == AppointmentStatus.SCHEDULED
    ).order_by(Appointment.date_time).all()
    logger.info(f"Found {len(appointments)} scheduled appointments for {date}")
    return [enrich_appointment(a) for a in appointments]


def are_reminders_already_sent(appointment_id, date):
    return ReminderLog.query.filter_by(appointment_id=appointment_id, reminder_date=date).first() is not None


def mark_reminders_as_sent(appointment_id, date):
    try:
        db.session.add(ReminderLog(appointment_id=appointment_id, reminder_date=date))
        db.session.commit()
    except IntegrityError:
        # another run marked it first
        db.session.rollback()
    logger.debug(f"Marked reminders as sent for appointment {appointment_id} on {date}")


def _dispatch(data, send_owner, send_vet, kind):
    queued = 0
    if data.owner_email and data.owner_email.strip():
        send_owner(data)
        queued += 1
    else:
        logger.warning(f"No owner email available for appointment {data.appointment_id}; skipping owner {kind}")
    if data.veterinarian_email and data.veterinarian_email.strip():
        send_vet(data)
        queued += 1
    else:
        logger.warning(f"No veterinarian email available for appointment {data.appointment_id}; skipping vet {kind}")
    return queued


def process_reminders_for_date(date):
    logger.info(f"Processing reminders for date: {date}")
    summary = {'date': date.isoformat(), 'found': 0, 'sent': 0, 'skipped': 0, 'failed': 0}
    try:
        appointments = get_appointments_for_date(date)
    except Exception as e:
        logger.error(f"Error loading appointments for {date}: {e}")
        raise
    summary['found'] = len(appointments)

    for data in appointments:
        try:
            if are_reminders_already_sent(data.appointment_id, date):
                logger.debug(f"Reminders already sent for appointment {data.appointment_id}")
                summary['skipped'] += 1
                continue
            _dispatch(data, email_service.send_owner_reminder, email_service.send_vet_reminder, 'reminder')
            mark_reminders_as_sent(data.appointment_id, date)
            summary['sent'] += 1
        except Exception as e:
            db.session.rollback()
            logger.error(f"Failed to send reminder for appointment {data.appointment_id}: {e}")
            summary['failed'] += 1

    logger.info(
        f"Reminder run for {date} finished: {summary['sent']} sent, "
        f"{summary['skipped']} skipped, {summary['failed']} failed"
    )
    return summary


def process_todays_reminders():
    return process_reminders_for_date(datetime.date.today())


def send_reminder_for_appointment(appointment_id):
    """Resend reminders for one appointment regardless of the sent-marker."""
    data = get_appointment_reminder_data(appointment_id)
    if not data:
        logger.warning(f"Appointment not found with ID: {appointment_id}")
        return False
    _dispatch(data, email_service.send_owner_reminder, email_service.send_vet_reminder, 'reminder')
    logger.info(f"Manual reminder queued for appointment {appointment_id}")
    return True


def send_immediate_confirmation(appointment_id):
    data = get_appointment_reminder_data(appointment_id)
    if not data:
        logger.warning(f"Appointment not found with ID: {appointment_id}")
        return False
    _dispatch(data, email_service.send_owner_confirmation, email_service.send_vet_confirmation, 'confirmation')
    logger.info(f"Immediate confirmation queued for appointment {appointment_id}")
    return True
