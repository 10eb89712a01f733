from flask_restx import Namespace, Resource, fields
from flask import request
from ..models import Role
from ..services import message_service
from ..utils import role_required, current_identity

message_ns = Namespace('messages', description='Contact form and personal messages', path='/messages')

contact_model = message_ns.model('Contact', {
    'name': fields.String(required=True, description='Sender name'),
    'email': fields.String(required=True, description='Sender email'),
    'subject': fields.String(required=True),
    'content': fields.String(required=True, description='Up to 2000 characters')
})

contact_admin_model = message_ns.model('ContactAdmin', {
    'subject': fields.String(required=True),
    'content': fields.String(required=True)
})

ALL_ROLES = (Role.ADMIN, Role.VETERINARIAN, Role.OWNER)


@message_ns.route('/contact')
class Contact(Resource):
    @message_ns.expect(contact_model)
    def post(self):
        """Public contact form"""
        data, error, status = message_service.create_contact_message(request.get_json(silent=True))
        if error:
            return error, status
        return {'message': 'Your message has been sent. We will get back to you soon.', 'data': data}, status


@message_ns.route('/contact-admin')
class ContactAdmin(Resource):
    @role_required(Role.OWNER, Role.VETERINARIAN)
    @message_ns.expect(contact_admin_model)
    @message_ns.doc('contact_admin', security='BearerAuth')
    def post(self):
        data, error, status = message_service.contact_admin(request.get_json(silent=True), current_identity())
        if error:
            return error, status
        return {'message': 'Message sent to the clinic administrator', 'data': data}, status


@message_ns.route('/sent')
class SentMessages(Resource):
    @role_required(*ALL_ROLES)
    @message_ns.doc('sent_messages', security='BearerAuth')
    def get(self):
        return message_service.get_sent(current_identity()), 200


@message_ns.route('/unread')
class UnreadMessages(Resource):
    @role_required(*ALL_ROLES)
    @message_ns.doc('unread_messages', security='BearerAuth')
    def get(self):
        return message_service.get_unread(current_identity()), 200


@message_ns.route('/latest')
class LatestMessages(Resource):
    @role_required(*ALL_ROLES)
    @message_ns.doc('latest_messages', security='BearerAuth', params={'limit': 'How many (default 5)'})
    def get(self):
        limit = request.args.get('limit', 5, type=int)
        return message_service.get_latest(current_identity(), limit), 200


@message_ns.route('/<int:message_id>')
class MessageResource(Resource):
    @role_required(*ALL_ROLES)
    @message_ns.doc('read_message', security='BearerAuth')
    def get(self, message_id):
        data, error, status = message_service.get_message(message_id, current_identity())
        if error:
            return error, status
        return data, status

    @role_required(*ALL_ROLES)
    @message_ns.doc('delete_message', security='BearerAuth')
    def delete(self, message_id):
        return message_service.delete_message(message_id, current_identity())


@message_ns.route('/<int:message_id>/read')
class MarkRead(Resource):
    @role_required(*ALL_ROLES)
    @message_ns.doc('mark_message_read', security='BearerAuth')
    def post(self, message_id):
        data, error, status = message_service.mark_as_read(message_id, current_identity())
        if error:
            return error, status
        return data, status
