# Message service module: contact form, user messages and admin replies
import logging
from ..models import Message, User, Role
from .. import db
from . import email_service
from .owner_service import EMAIL_REGEX

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 2000
MAX_SUBJECT_LENGTH = 200
MAX_SENDER_LENGTH = 120


def format_message(message):
    return {
        'id': message.id,
        'senderName': message.sender_name,
        'senderEmail': message.sender_email,
        'subject': message.subject,
        'content': message.content,
        'sentAt': message.sent_at.isoformat(),
        'isRead': message.is_read,
        'receiverId': message.receiver_id,
        'receiverName': message.receiver_name
    }


def _validate_content(data, fields):
    missing = [field for field in fields if not data.get(field)]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    if len(data['subject']) > MAX_SUBJECT_LENGTH:
        return f'Subject cannot exceed {MAX_SUBJECT_LENGTH} characters'
    if len(data['content']) > MAX_CONTENT_LENGTH:
        return f'Message content cannot exceed {MAX_CONTENT_LENGTH} characters'
    return None


def _first_admin():
    return User.query.filter_by(role=Role.ADMIN).order_by(User.id).first()


def _store(sender_name, sender_email, subject, content, receiver):
    message = Message(
        sender_name=sender_name,
        sender_email=sender_email,
        subject=subject,
        content=content,
        receiver_id=receiver.id if receiver else None,
        receiver_name=receiver.full_name if receiver else None
    )
    db.session.add(message)
    db.session.commit()
    logger.info(f"Message {message.id} from {sender_email} stored for receiver {message.receiver_id}")
    return message


def create_contact_message(data):
    """Public contact form; the message lands in the first admin's inbox."""
    if not data:
        return None, {'message': 'No data provided'}, 400
    error = _validate_content(data, ('name', 'email', 'subject', 'content'))
    if error:
        return None, {'message': error}, 400
    if len(data['name']) > MAX_SENDER_LENGTH or len(data['email']) > MAX_SENDER_LENGTH:
        return None, {'message': f'Name and email cannot exceed {MAX_SENDER_LENGTH} characters'}, 400
    if not EMAIL_REGEX.match(data['email']):
        return None, {'message': 'Please provide a valid email address'}, 400
    message = _store(data['name'], data['email'], data['subject'], data['content'], _first_admin())
    return format_message(message), None, 201


def contact_admin(data, current_user_identity):
    sender = db.session.get(User, current_user_identity['id'])
    if not sender:
        return None, {'message': 'User not found'}, 404
    if not data:
        return None, {'message': 'No data provided'}, 400
    error = _validate_content(data, ('subject', 'content'))
    if error:
        return None, {'message': error}, 400
    admin = _first_admin()
    if not admin:
        return None, {'message': 'No administrator available to receive messages'}, 404
    message = _store(sender.full_name, sender.email, data['subject'], data['content'], admin)
    return format_message(message), None, 201


def send_message(data, current_user_identity):
    sender = db.session.get(User, current_user_identity['id'])
    if not sender:
        return None, {'message': 'User not found'}, 404
    if not data:
        return None, {'message': 'No data provided'}, 400
    error = _validate_content(data, ('recipientId', 'subject', 'content'))
    if error:
        return None, {'message': error}, 400
    recipient = db.session.get(User, data['recipientId'])
    if not recipient:
        return None, {'message': 'Recipient not found'}, 404
    message = _store(sender.full_name, sender.email, data['subject'], data['content'], recipient)
    return format_message(message), None, 201


def get_inbox(current_user_identity):
    messages = Message.query.filter_by(
        receiver_id=current_user_identity['id']
    ).order_by(Message.sent_at.desc()).all()
    return [format_message(m) for m in messages]


def get_sent(current_user_identity):
    user = db.session.get(User, current_user_identity['id'])
    if not user:
        return []
    messages = Message.query.filter_by(sender_email=user.email).order_by(Message.sent_at.desc()).all()
    return [format_message(m) for m in messages]


def get_unread(current_user_identity):
    messages = Message.query.filter_by(
        receiver_id=current_user_identity['id'], is_read=False
    ).order_by(Message.sent_at.desc()).all()
    return [format_message(m) for m in messages]


def get_latest(current_user_identity, limit=5):
    messages = Message.query.filter_by(
        receiver_id=current_user_identity['id']
    ).order_by(Message.sent_at.desc()).limit(limit).all()
    return [format_message(m) for m in messages]


def get_all_messages():
    return [format_message(m) for m in Message.query.order_by(Message.sent_at.desc()).all()]


def count_unread(receiver_id=None):
    query = Message.query.filter_by(is_read=False)
    if receiver_id is not None:
        query = query.filter_by(receiver_id=receiver_id)
    return query.count()


def _get_visible(message_id, current_user_identity):
    message = db.session.get(Message, message_id)
    if not message:
        return None, ({'message': 'Message not found'}, 404)
    if current_user_identity['role'] != Role.ADMIN.value and message.receiver_id != current_user_identity['id']:
        return None, ({'message': 'You are not allowed to access this message'}, 403)
    return message, None


def get_message(message_id, current_user_identity):
    """Open a message; the receiver (or an admin) opening it marks it read."""
    message, failure = _get_visible(message_id, current_user_identity)
    if failure:
        return None, failure[0], failure[1]
    if not message.is_read:
        message.is_read = True
        db.session.commit()
    return format_message(message), None, 200


def mark_as_read(message_id, current_user_identity):
    message, failure = _get_visible(message_id, current_user_identity)
    if failure:
        return None, failure[0], failure[1]
    message.is_read = True
    db.session.commit()
    return format_message(message), None, 200


def reply_to_message(message_id, data, current_user_identity):
    original, failure = _get_visible(message_id, current_user_identity)
    if failure:
        return None, failure[0], failure[1]
    admin = db.session.get(User, current_user_identity['id'])
    if not data or not data.get('content'):
        return None, {'message': 'Reply content is required'}, 400
    if len(data['content']) > MAX_CONTENT_LENGTH:
        return None, {'message': f'Message content cannot exceed {MAX_CONTENT_LENGTH} characters'}, 400

    recipient = User.query.filter_by(email=original.sender_email).first()
    reply = Message(
        sender_name=admin.full_name,
        sender_email=admin.email,
        subject=f"Re: {original.subject}"[:MAX_SUBJECT_LENGTH],
        content=data['content'],
        receiver_id=recipient.id if recipient else None,
        receiver_name=recipient.full_name if recipient else original.sender_name
    )
    original.is_read = True
    db.session.add(reply)
    db.session.commit()
    logger.info(f"Reply {reply.id} to message {original.id} stored")

    try:
        email_service.send_message_reply(original.sender_email, original.sender_name,
                                         original.subject, data['content'])
    except Exception as e:
        logger.error(f"Could not queue reply email for message {original.id}: {e}")
    return format_message(reply), None, 201


def delete_message(message_id, current_user_identity):
    message, failure = _get_visible(message_id, current_user_identity)
    if failure:
        return failure
    db.session.delete(message)
    db.session.commit()
    return {'message': 'Message deleted'}, 200
