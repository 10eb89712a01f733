import datetime
import logging
from flask import current_app
from flask_restx import Namespace, Resource
from .. import db
from ..models import Role
from ..services import reminder_service
from ..services.email_service import get_dispatcher
from ..utils import role_required, parse_date

logger = logging.getLogger(__name__)

reminder_ns = Namespace('reminders', description='Manual reminder triggers and status', path='/api/reminders')


def _ok(message, **extra):
    body = {'success': True, 'message': message, 'timestamp': datetime.datetime.now().isoformat()}
    body.update(extra)
    return body, 200


def _failed(message, error, **extra):
    db.session.rollback()
    logger.error(f"{message}: {error}")
    body = {'success': False, 'message': f"{message}: {error}", 'timestamp': datetime.datetime.now().isoformat()}
    body.update(extra)
    return body, 500


@reminder_ns.route('/trigger/today')
class TriggerToday(Resource):
    @role_required(Role.ADMIN)
    @reminder_ns.doc('trigger_today', security='BearerAuth')
    def post(self):
        """Send today's reminders now"""
        try:
            summary = reminder_service.process_todays_reminders()
            return _ok("Today's reminders processed successfully", date=summary['date'], summary=summary)
        except Exception as e:
            return _failed("Failed to process today's reminders", e)


@reminder_ns.route('/trigger/date/<string:date>')
class TriggerDate(Resource):
    @role_required(Role.ADMIN)
    @reminder_ns.doc('trigger_date', security='BearerAuth', params={'date': 'YYYY-MM-DD'})
    def post(self, date):
        try:
            target = parse_date(date)
            summary = reminder_service.process_reminders_for_date(target)
            return _ok(f"Reminders processed successfully for {target}", date=target.isoformat(), summary=summary)
        except Exception as e:
            return _failed(f"Failed to process reminders for {date}", e, date=date)


@reminder_ns.route('/send/<int:appointment_id>')
class SendForAppointment(Resource):
    @role_required(Role.ADMIN)
    @reminder_ns.doc('send_for_appointment', security='BearerAuth')
    def post(self, appointment_id):
        """Resend the reminder emails for one appointment"""
        try:
            if not reminder_service.send_reminder_for_appointment(appointment_id):
                body = {
                    'success': False,
                    'message': f"Appointment not found with ID: {appointment_id}",
                    'appointmentId': appointment_id,
                    'timestamp': datetime.datetime.now().isoformat()
                }
                return body, 404
            return _ok(f"Reminder sent successfully for appointment {appointment_id}", appointmentId=appointment_id)
        except Exception as e:
            return _failed(f"Failed to send reminder for appointment {appointment_id}", e,
                           appointmentId=appointment_id)


def _appointments_for(target):
    appointments = reminder_service.get_appointments_for_date(target)
    return _ok(
        f"Found {len(appointments)} appointments for {target}",
        date=target.isoformat(),
        appointmentCount=len(appointments),
        appointments=[a.to_dict() for a in appointments]
    )


@reminder_ns.route('/appointments/today')
class AppointmentsToday(Resource):
    @role_required(Role.ADMIN)
    @reminder_ns.doc('appointments_today', security='BearerAuth')
    def get(self):
        try:
            return _appointments_for(datetime.date.today())
        except Exception as e:
            return _failed("Failed to get today's appointments", e)


@reminder_ns.route('/appointments/<string:date>')
class AppointmentsForDate(Resource):
    @role_required(Role.ADMIN)
    @reminder_ns.doc('appointments_for_date', security='BearerAuth', params={'date': 'YYYY-MM-DD'})
    def get(self, date):
        try:
            return _appointments_for(parse_date(date))
        except Exception as e:
            return _failed(f"Failed to get appointments for {date}", e, date=date)


@reminder_ns.route('/status')
class ReminderStatus(Resource):
    @role_required(Role.ADMIN)
    @reminder_ns.doc('reminder_status', security='BearerAuth')
    def get(self):
        return _ok(
            'Reminder service is running',
            enabled=current_app.config.get('REMINDER_ENABLED', True),
            schedule=current_app.config.get('REMINDER_CRON'),
            email=get_dispatcher().snapshot()
        )
