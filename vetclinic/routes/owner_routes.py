import logging
from flask_restx import Namespace, Resource, fields, reqparse
from werkzeug.datastructures import FileStorage
from flask import request
from .. import db
from ..models import Role
from ..services import (appointment_service, dashboard_service, message_service, pet_service,
                        prescription_service, vet_service)
from ..utils import role_required, current_identity

logger = logging.getLogger(__name__)

owner_ns = Namespace('owner', description='Pet owner area', path='/owner')

booking_model = owner_ns.model('Booking', {
    'petId': fields.Integer(required=True, description='Pet ID'),
    'veterinarianId': fields.Integer(required=True, description='Veterinarian user ID'),
    'dateTime': fields.String(required=True, description='ISO date-time, e.g. 2024-01-01T10:00'),
    'reason': fields.String(description='Reason for the visit')
})

reschedule_model = owner_ns.model('Reschedule', {
    'dateTime': fields.String(description='New ISO date-time'),
    'veterinarianId': fields.Integer(description='New veterinarian user ID'),
    'reason': fields.String(description='Reason for the visit')
})

message_model = owner_ns.model('OwnerMessage', {
    'recipientId': fields.Integer(required=True, description='Receiving user ID'),
    'subject': fields.String(required=True),
    'content': fields.String(required=True)
})

pet_parser = reqparse.RequestParser()
pet_parser.add_argument('name', type=str, help='Pet name', location='form')
pet_parser.add_argument('species', type=str, help='Species', location='form')
pet_parser.add_argument('breed', type=str, help='Breed', location='form')
pet_parser.add_argument('dateOfBirth', type=str, help='Date of birth (YYYY-MM-DD)', location='form')
pet_parser.add_argument('gender', type=str, help='MALE, FEMALE or UNKNOWN', location='form')
pet_parser.add_argument('medicalHistory', type=str, help='Medical history', location='form')
pet_parser.add_argument('image', type=FileStorage, location='files', help='Pet image')


def _pet_args():
    args = pet_parser.parse_args()
    image = args.pop('image', None)
    return {k: v for k, v in args.items() if v is not None}, image


@owner_ns.route('/dashboard')
class OwnerDashboard(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('owner_dashboard', security='BearerAuth')
    def get(self):
        data, error, status = dashboard_service.get_owner_dashboard(current_identity())
        if error:
            return error, status
        return data, status


@owner_ns.route('/pets')
class OwnerPetList(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('list_my_pets', security='BearerAuth')
    def get(self):
        data, error, status = pet_service.get_pets_by_owner(current_identity())
        if error:
            return error, status
        return data, status

    @role_required(Role.OWNER)
    @owner_ns.expect(pet_parser)
    @owner_ns.doc('add_pet', security='BearerAuth')
    def post(self):
        args, image = _pet_args()
        try:
            data, error, status = pet_service.create_pet(args, image, current_identity())
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error creating pet: {e}")
            return {'message': 'Error creating pet', 'error': str(e)}, 500
        if error:
            return error, status
        return data, status


@owner_ns.route('/pets/<int:pet_id>')
class OwnerPetResource(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('get_my_pet', security='BearerAuth')
    def get(self, pet_id):
        data, error, status = pet_service.get_pet(pet_id, current_identity())
        if error:
            return error, status
        return data, status

    @role_required(Role.OWNER)
    @owner_ns.expect(pet_parser)
    @owner_ns.doc('update_my_pet', security='BearerAuth')
    def put(self, pet_id):
        args, image = _pet_args()
        data, error, status = pet_service.update_pet(pet_id, args, image, current_identity())
        if error:
            return error, status
        return data, status

    @role_required(Role.OWNER)
    @owner_ns.doc('delete_my_pet', security='BearerAuth')
    def delete(self, pet_id):
        return pet_service.delete_pet(pet_id, current_identity())


@owner_ns.route('/appointments')
class OwnerAppointmentList(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('list_my_appointments', security='BearerAuth')
    def get(self):
        """Appointments grouped into upcoming, completed and cancelled"""
        data, error, status = appointment_service.get_owner_appointments(current_identity())
        if error:
            return error, status
        return data, status


@owner_ns.route('/appointments/book')
class BookAppointment(Resource):
    @role_required(Role.OWNER)
    @owner_ns.expect(booking_model)
    @owner_ns.doc('book_appointment', security='BearerAuth')
    def post(self):
        try:
            data, error, status = appointment_service.book_appointment(
                request.get_json(silent=True), current_identity())
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error booking appointment: {e}")
            return {'message': 'Error booking appointment', 'error': str(e)}, 500
        if error:
            return error, status
        return {'message': 'Appointment booked successfully', 'appointment': data}, status


@owner_ns.route('/appointments/<int:appointment_id>/reschedule')
class RescheduleAppointment(Resource):
    @role_required(Role.OWNER)
    @owner_ns.expect(reschedule_model)
    @owner_ns.doc('reschedule_appointment', security='BearerAuth')
    def put(self, appointment_id):
        try:
            data, error, status = appointment_service.reschedule_appointment(
                appointment_id, request.get_json(silent=True), current_identity())
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error rescheduling appointment {appointment_id}: {e}")
            return {'message': 'Error updating appointment', 'error': str(e)}, 500
        if error:
            return error, status
        return {'message': 'Appointment updated successfully', 'appointment': data}, status


@owner_ns.route('/appointments/<int:appointment_id>/cancel')
class OwnerCancelAppointment(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('cancel_my_appointment', security='BearerAuth')
    def post(self, appointment_id):
        data, error, status = appointment_service.cancel_appointment(appointment_id, current_identity())
        if error:
            return error, status
        return {'message': 'Appointment cancelled', 'appointment': data}, status


@owner_ns.route('/prescriptions')
class OwnerPrescriptionList(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('list_my_prescriptions', security='BearerAuth')
    def get(self):
        return prescription_service.get_prescriptions_by_owner(current_identity()), 200


@owner_ns.route('/prescriptions/<int:prescription_id>')
class OwnerPrescription(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('view_my_prescription', security='BearerAuth')
    def get(self, prescription_id):
        data, error, status = prescription_service.get_prescription(prescription_id, current_identity())
        if error:
            return error, status
        return data, status


@owner_ns.route('/doctors')
class DoctorList(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('list_doctors', security='BearerAuth')
    def get(self):
        """Veterinarians available for booking"""
        return vet_service.get_all_vets(), 200


@owner_ns.route('/messages')
class OwnerMessages(Resource):
    @role_required(Role.OWNER)
    @owner_ns.doc('owner_inbox', security='BearerAuth')
    def get(self):
        return message_service.get_inbox(current_identity()), 200

    @role_required(Role.OWNER)
    @owner_ns.expect(message_model)
    @owner_ns.doc('owner_send_message', security='BearerAuth')
    def post(self):
        data, error, status = message_service.send_message(request.get_json(silent=True), current_identity())
        if error:
            return error, status
        return data, status
