import logging
from flask_restx import Namespace, Resource, fields
from flask import request
from .. import db
from ..models import Role
from ..services import (appointment_service, dashboard_service, message_service, pet_service,
                        prescription_service)
from ..utils import role_required, current_identity

logger = logging.getLogger(__name__)

vet_ns = Namespace('vet', description='Veterinarian area', path='/vet')

prescription_model = vet_ns.model('Prescription', {
    'petId': fields.Integer(required=True, description='Pet ID'),
    'appointmentId': fields.Integer(description='Existing appointment to complete'),
    'symptoms': fields.String(required=True),
    'diagnosis': fields.String(required=True),
    'medications': fields.String(required=True),
    'notes': fields.String()
})

prescription_update_model = vet_ns.model('PrescriptionUpdate', {
    'symptoms': fields.String(),
    'diagnosis': fields.String(),
    'medications': fields.String(),
    'notes': fields.String()
})

message_model = vet_ns.model('VetMessage', {
    'recipientId': fields.Integer(required=True, description='Receiving user ID'),
    'subject': fields.String(required=True),
    'content': fields.String(required=True)
})


@vet_ns.route('/dashboard')
class VetDashboard(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('vet_dashboard', security='BearerAuth')
    def get(self):
        return dashboard_service.get_vet_dashboard(current_identity()), 200


@vet_ns.route('/appointments')
class VetAppointmentList(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('list_vet_appointments', security='BearerAuth')
    def get(self):
        return appointment_service.get_vet_appointments(current_identity()), 200


@vet_ns.route('/appointments/calendar')
class VetCalendar(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('vet_calendar', security='BearerAuth')
    def get(self):
        """Scheduled appointments as calendar events"""
        return appointment_service.get_vet_calendar(current_identity()), 200


@vet_ns.route('/appointments/<int:appointment_id>/complete')
class CompleteAppointment(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('complete_appointment', security='BearerAuth')
    def post(self, appointment_id):
        data, error, status = appointment_service.complete_appointment(appointment_id, current_identity())
        if error:
            return error, status
        return {'message': 'Appointment marked as completed', 'appointment': data}, status


@vet_ns.route('/appointments/<int:appointment_id>/cancel')
class VetCancelAppointment(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('vet_cancel_appointment', security='BearerAuth')
    def post(self, appointment_id):
        data, error, status = appointment_service.cancel_appointment(appointment_id, current_identity())
        if error:
            return error, status
        return {'message': 'Appointment cancelled', 'appointment': data}, status


@vet_ns.route('/pets')
class VetPetList(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('vet_list_pets', security='BearerAuth')
    def get(self):
        """Every pet, for choosing one when writing a prescription"""
        return pet_service.get_all_pets(), 200


@vet_ns.route('/prescriptions')
class VetPrescriptionList(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('list_vet_prescriptions', security='BearerAuth')
    def get(self):
        return prescription_service.get_prescriptions_by_vet(current_identity()), 200

    @role_required(Role.VETERINARIAN)
    @vet_ns.expect(prescription_model)
    @vet_ns.doc('create_prescription', security='BearerAuth')
    def post(self):
        data, error, status = prescription_service.create_prescription(
            request.get_json(silent=True), current_identity())
        if error:
            return error, status
        return {'message': 'Prescription created successfully', 'prescription': data}, status


@vet_ns.route('/prescriptions/<int:prescription_id>')
class VetPrescription(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('view_prescription', security='BearerAuth')
    def get(self, prescription_id):
        data, error, status = prescription_service.get_prescription(prescription_id, current_identity())
        if error:
            return error, status
        return data, status

    @role_required(Role.VETERINARIAN)
    @vet_ns.expect(prescription_update_model)
    @vet_ns.doc('edit_prescription', security='BearerAuth')
    def put(self, prescription_id):
        try:
            data, error, status = prescription_service.update_prescription(
                prescription_id, request.get_json(silent=True), current_identity())
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error updating prescription {prescription_id}: {e}")
            return {'message': 'Error updating prescription', 'error': str(e)}, 500
        if error:
            return error, status
        return {'message': 'Prescription updated successfully', 'prescription': data}, status


@vet_ns.route('/prescriptions/appointment/<int:appointment_id>')
class AppointmentPrescriptions(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('prescriptions_by_appointment', security='BearerAuth')
    def get(self, appointment_id):
        return prescription_service.get_prescriptions_by_appointment(appointment_id, current_identity()), 200


@vet_ns.route('/messages')
class VetMessages(Resource):
    @role_required(Role.VETERINARIAN)
    @vet_ns.doc('vet_inbox', security='BearerAuth')
    def get(self):
        return message_service.get_inbox(current_identity()), 200

    @role_required(Role.VETERINARIAN)
    @vet_ns.expect(message_model)
    @vet_ns.doc('vet_send_message', security='BearerAuth')
    def post(self):
        data, error, status = message_service.send_message(request.get_json(silent=True), current_identity())
        if error:
            return error, status
        return data, status
