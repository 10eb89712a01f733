from vetclinic.models import Message
from vetclinic.services import message_service
from conftest import identity_of, auth_header


def test_public_contact_form_reaches_admin(client, admin_user):
    response = client.post('/messages/contact', json={
        'name': 'Visitor', 'email': 'visitor@example.com', 'subject': 'Opening hours', 'content': 'Open Sunday?'})
    assert response.status_code == 201
    inbox = message_service.get_inbox(identity_of(admin_user))
    assert len(inbox) == 1
    assert inbox[0]['senderEmail'] == 'visitor@example.com'
    assert inbox[0]['isRead'] is False


def test_contact_form_validation(client):
    response = client.post('/messages/contact', json={
        'name': 'Visitor', 'email': 'not-an-email', 'subject': 'Hi', 'content': 'Hello'})
    assert response.status_code == 400
    response = client.post('/messages/contact', json={
        'name': 'Visitor', 'email': 'v@example.com', 'subject': 'Hi', 'content': 'x' * 2001})
    assert response.status_code == 400


def test_contact_admin_and_reply(owner_user, admin_user, dispatcher):
    sent, error, status = message_service.contact_admin(
        {'subject': 'Invoice', 'content': 'Where is my invoice?'}, identity_of(owner_user))
    assert status == 201
    assert sent['receiverId'] == admin_user.id
    assert message_service.count_unread(admin_user.id) == 1

    reply, error, status = message_service.reply_to_message(
        sent['id'], {'content': 'Sent it again.'}, identity_of(admin_user))
    assert status == 201
    assert reply['subject'] == 'Re: Invoice'
    assert reply['receiverId'] == owner_user.id
    assert message_service.count_unread(admin_user.id) == 0

    assert dispatcher.wait(timeout=5)
    assert dispatcher.outbox[-1]['to'] == owner_user.email
    assert dispatcher.outbox[-1]['subject'] == 'Re: Invoice'
    assert [m['subject'] for m in message_service.get_inbox(identity_of(owner_user))] == ['Re: Invoice']


def test_messages_are_private(owner_user, vet_user, make_user):
    stranger = make_user()
    sent = message_service.send_message(
        {'recipientId': vet_user.id, 'subject': 'Rex', 'content': 'Is Rex ok?'}, identity_of(owner_user))[0]
    assert message_service.get_message(sent['id'], identity_of(stranger))[2] == 403
    assert message_service.mark_as_read(sent['id'], identity_of(vet_user))[0]['isRead'] is True
    assert message_service.get_sent(identity_of(owner_user))[0]['id'] == sent['id']
    assert message_service.get_unread(identity_of(vet_user)) == []


def test_owner_inbox_api(client, owner_user, vet_user):
    client.post('/vet/messages', json={'recipientId': owner_user.id, 'subject': 'Results', 'content': 'All good'},
                headers=auth_header(vet_user))
    response = client.get('/owner/messages', headers=auth_header(owner_user))
    assert response.status_code == 200
    assert response.get_json()[0]['senderName'] == 'Victor Vet'

    message_id = response.get_json()[0]['id']
    assert client.delete(f'/messages/{message_id}', headers=auth_header(owner_user)).status_code == 200
    assert Message.query.count() == 0


def test_overlong_subject_and_sender_are_rejected(client, owner_user, admin_user):
    response = client.post('/messages/contact', json={
        'name': 'Visitor', 'email': 'v@example.com', 'subject': 's' * 201, 'content': 'Hello'})
    assert response.status_code == 400
    response = client.post('/messages/contact', json={
        'name': 'n' * 121, 'email': 'v@example.com', 'subject': 'Hi', 'content': 'Hello'})
    assert response.status_code == 400

    data, error, status = message_service.contact_admin(
        {'subject': 's' * 201, 'content': 'Hello'}, identity_of(owner_user))
    assert status == 400
    assert error['message'] == 'Subject cannot exceed 200 characters'

    sent = message_service.contact_admin({'subject': 's' * 200, 'content': 'Hello'}, identity_of(owner_user))[0]
    reply, error, status = message_service.reply_to_message(sent['id'], {'content': 'Noted'}, identity_of(admin_user))
    assert status == 201
    assert len(reply['subject']) == 200
    assert Message.query.count() == 2
