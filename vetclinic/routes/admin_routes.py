import logging
from flask_restx import Namespace, Resource, fields
from flask import request
from .. import db
from ..models import Role
from ..services import (appointment_service, dashboard_service, message_service, owner_service,
                        pet_service, prescription_service, user_service, vet_service)
from ..utils import role_required, current_identity

logger = logging.getLogger(__name__)

admin_ns = Namespace('admin', description='Administration', path='/admin')

user_update_model = admin_ns.model('UserUpdate', {
    'username': fields.String(),
    'fullName': fields.String(),
    'email': fields.String(),
    'mobile': fields.String(),
    'address': fields.String(description='Owners only')
})

owner_model = admin_ns.model('Owner', {
    'name': fields.String(required=True),
    'address': fields.String(required=True),
    'phone': fields.String(description='10 digits'),
    'email': fields.String(required=True),
    'userId': fields.Integer(description='Linked OWNER account')
})

vet_model = admin_ns.model('Veterinarian', {
    'username': fields.String(required=True),
    'email': fields.String(required=True),
    'password': fields.String(description='Required on create; blank keeps the current one on update'),
    'fullName': fields.String(required=True),
    'mobile': fields.String(),
    'specialization': fields.String(),
    'workingHours': fields.String()
})

reply_model = admin_ns.model('Reply', {
    'content': fields.String(required=True, description='Reply text, emailed to the sender')
})


@admin_ns.route('/dashboard')
class AdminDashboard(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_dashboard', security='BearerAuth')
    def get(self):
        return dashboard_service.get_admin_dashboard(current_identity()), 200


@admin_ns.route('/users')
class UserList(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('list_users', security='BearerAuth', params={'role': 'Filter by role'})
    def get(self):
        role = request.args.get('role')
        if not role:
            return user_service.get_all_users(), 200
        users = user_service.find_by_role(role)
        if users is None:
            return {'message': f'Invalid role. Valid roles: {[r.value for r in Role]}'}, 400
        return [user_service.format_user(u) for u in users], 200


@admin_ns.route('/users/<int:user_id>')
class UserResource(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('get_user', security='BearerAuth')
    def get(self, user_id):
        data, error, status = user_service.get_user_data(user_id)
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN)
    @admin_ns.expect(user_update_model)
    @admin_ns.doc('edit_user', security='BearerAuth')
    def put(self, user_id):
        data, error, status = user_service.update_user(user_id, request.get_json(silent=True))
        if error:
            return error, status
        return {'message': 'User updated successfully', 'user': data}, status

    @role_required(Role.ADMIN)
    @admin_ns.doc('delete_user', security='BearerAuth')
    def delete(self, user_id):
        """Delete a user; an owner account takes its owner record and pets with it"""
        return user_service.delete_user(user_id, current_identity())


@admin_ns.route('/users/<int:user_id>/toggle-block')
class ToggleBlock(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('toggle_block', security='BearerAuth')
    def post(self, user_id):
        data, error, status = user_service.toggle_block(user_id, current_identity())
        if error:
            return error, status
        return data, status


@admin_ns.route('/pets')
class AdminPetList(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_list_pets', security='BearerAuth')
    def get(self):
        return pet_service.get_all_pets(), 200


@admin_ns.route('/pets/<int:pet_id>')
class AdminPetResource(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_get_pet', security='BearerAuth')
    def get(self, pet_id):
        data, error, status = pet_service.get_pet(pet_id, current_identity())
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_delete_pet', security='BearerAuth')
    def delete(self, pet_id):
        return pet_service.delete_pet(pet_id, current_identity())


@admin_ns.route('/owners')
class OwnerList(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('list_owners', security='BearerAuth')
    def get(self):
        return owner_service.get_all_owners(), 200

    @role_required(Role.ADMIN)
    @admin_ns.expect(owner_model)
    @admin_ns.doc('create_owner', security='BearerAuth')
    def post(self):
        data, error, status = owner_service.create_owner(request.get_json(silent=True))
        if error:
            return error, status
        return data, status


@admin_ns.route('/owners/<int:owner_id>')
class OwnerResource(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('get_owner', security='BearerAuth')
    def get(self, owner_id):
        data, error, status = owner_service.get_owner(owner_id)
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN)
    @admin_ns.expect(owner_model)
    @admin_ns.doc('update_owner', security='BearerAuth')
    def put(self, owner_id):
        data, error, status = owner_service.update_owner(owner_id, request.get_json(silent=True))
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN)
    @admin_ns.doc('delete_owner', security='BearerAuth')
    def delete(self, owner_id):
        return owner_service.delete_owner(owner_id)


@admin_ns.route('/appointments')
class AdminAppointmentList(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_list_appointments', security='BearerAuth')
    def get(self):
        return appointment_service.get_all_appointments(), 200


@admin_ns.route('/prescriptions')
class AdminPrescriptionList(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_list_prescriptions', security='BearerAuth')
    def get(self):
        return prescription_service.get_all_prescriptions(), 200


@admin_ns.route('/prescriptions/<int:prescription_id>')
class AdminPrescription(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_view_prescription', security='BearerAuth')
    def get(self, prescription_id):
        data, error, status = prescription_service.get_prescription(prescription_id, current_identity())
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_delete_prescription', security='BearerAuth')
    def delete(self, prescription_id):
        try:
            return prescription_service.delete_prescription(prescription_id)
        except Exception as e:
            db.session.rollback()
            return {'message': 'Error deleting prescription', 'error': str(e)}, 500


@admin_ns.route('/messages')
class AdminMessageList(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_list_messages', security='BearerAuth')
    def get(self):
        return message_service.get_all_messages(), 200


@admin_ns.route('/messages/<int:message_id>')
class AdminMessage(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_view_message', security='BearerAuth')
    def get(self, message_id):
        data, error, status = message_service.get_message(message_id, current_identity())
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN)
    @admin_ns.doc('admin_delete_message', security='BearerAuth')
    def delete(self, message_id):
        return message_service.delete_message(message_id, current_identity())


@admin_ns.route('/messages/<int:message_id>/reply')
class AdminReply(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.expect(reply_model)
    @admin_ns.doc('admin_reply', security='BearerAuth')
    def post(self, message_id):
        try:
            data, error, status = message_service.reply_to_message(
                message_id, request.get_json(silent=True), current_identity())
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error replying to message {message_id}: {e}")
            return {'message': 'Error sending reply', 'error': str(e)}, 500
        if error:
            return error, status
        return {'message': 'Reply sent successfully', 'reply': data}, status


@admin_ns.route('/veterinarians')
class VeterinarianList(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('list_veterinarians', security='BearerAuth')
    def get(self):
        return vet_service.get_all_vets(), 200

    @role_required(Role.ADMIN)
    @admin_ns.expect(vet_model)
    @admin_ns.doc('create_veterinarian', security='BearerAuth')
    def post(self):
        data, error, status = vet_service.create_vet(request.get_json(silent=True))
        if error:
            return error, status
        return data, status


@admin_ns.route('/veterinarians/<int:vet_id>')
class VeterinarianResource(Resource):
    @role_required(Role.ADMIN)
    @admin_ns.doc('get_veterinarian', security='BearerAuth')
    def get(self, vet_id):
        data, error, status = vet_service.get_vet_by_id(vet_id)
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN)
    @admin_ns.expect(vet_model)
    @admin_ns.doc('update_veterinarian', security='BearerAuth')
    def put(self, vet_id):
        data, error, status = vet_service.update_vet(vet_id, request.get_json(silent=True))
        if error:
            return error, status
        return data, status

    @role_required(Role.ADMIN)
    @admin_ns.doc('delete_veterinarian', security='BearerAuth')
    def delete(self, vet_id):
        return vet_service.delete_vet(vet_id)
