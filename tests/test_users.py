import datetime
from vetclinic import db
from vetclinic.models import Owner, Pet, Role, User
from vetclinic.services import user_service, owner_service, profile_service, vet_service
from conftest import identity_of, auth_header, PASSWORD


def test_register_creates_linked_owner(owner_user):
    owner = owner_service.find_by_user_id(owner_user.id)
    assert owner is not None
    assert owner.name == 'Olivia Owner'
    assert owner.email == owner_user.email
    assert owner.address == '1 Main Street'
    assert owner_user.role == Role.OWNER


def test_register_rejects_duplicates_and_weak_passwords(owner_user):
    base = {'username': 'olivia', 'email': 'new@example.com', 'password': PASSWORD, 'fullName': 'X'}
    assert user_service.register_user(base)[1]['message'] == 'Username already exists'
    base.update(username='fresh', email=owner_user.email)
    assert user_service.register_user(base)[1]['message'] == 'Email already exists'
    base.update(email='fresh@example.com', password='short')
    assert user_service.register_user(base)[2] == 400


def test_vet_registration_has_no_owner_record(vet_user):
    assert owner_service.find_by_user_id(vet_user.id) is None


def test_authenticate_refuses_blocked_users(owner_user, admin_user):
    user, error, status = user_service.authenticate('olivia', PASSWORD)
    assert status == 200
    assert user_service.authenticate(owner_user.email, PASSWORD)[2] == 200
    assert user_service.authenticate('olivia', 'wrong-pass1')[2] == 401

    user_service.toggle_block(owner_user.id, identity_of(admin_user))
    assert user_service.authenticate('olivia', PASSWORD)[2] == 403


def test_admin_cannot_block_or_delete_self(admin_user):
    assert user_service.toggle_block(admin_user.id, identity_of(admin_user))[2] == 400
    assert user_service.delete_user(admin_user.id, identity_of(admin_user))[1] == 400


def test_deleting_owner_user_removes_owner_and_pets(owner_user, admin_user, make_user, make_pet):
    neighbour = make_user(Role.OWNER)
    make_pet(owner_user, name='Rex')
    make_pet(owner_user, name='Milo')
    kept = make_pet(neighbour, name='Luna')
    owner_id = owner_service.find_by_user_id(owner_user.id).id
    user_id = owner_user.id

    body, status = user_service.delete_user(user_id, identity_of(admin_user))
    assert status == 200
    assert db.session.get(User, user_id) is None
    assert db.session.get(Owner, owner_id) is None
    assert [p.id for p in Pet.query.all()] == [kept.id]
    assert owner_service.find_by_user_id(neighbour.id) is not None


def test_profile_variants_by_role(owner_user, vet_user, admin_user):
    owner_profile = profile_service.get_profile(identity_of(owner_user))[0]
    assert 'address' in owner_profile and 'ownerId' in owner_profile
    vet_profile = profile_service.get_profile(identity_of(vet_user))[0]
    assert 'specialization' in vet_profile and 'address' not in vet_profile
    admin_profile = profile_service.get_profile(identity_of(admin_user))[0]
    assert 'specialization' not in admin_profile and 'address' not in admin_profile


def test_owner_profile_update_syncs_owner_row(owner_user):
    data, error, status = profile_service.update_profile(
        identity_of(owner_user),
        {'fullName': 'Olivia Smith', 'address': '9 New Road', 'mobile': '5559998888', 'role': 'ADMIN'})
    assert status == 200
    owner = owner_service.find_by_user_id(owner_user.id)
    assert owner.name == 'Olivia Smith'
    assert owner.address == '9 New Road'
    assert owner.phone == '5559998888'
    assert db.session.get(User, owner_user.id).role == Role.OWNER


def test_profile_email_must_stay_unique(owner_user, vet_user):
    data, error, status = profile_service.update_profile(identity_of(owner_user), {'email': vet_user.email})
    assert status == 400


def test_vet_profile_update(vet_user):
    data, error, status = profile_service.update_profile(
        identity_of(vet_user), {'specialization': 'Surgery', 'workingHours': 'Mon-Fri 9-17'})
    assert data['specialization'] == 'Surgery'
    assert data['workingHours'] == 'Mon-Fri 9-17'


def test_vet_update_keeps_password_when_blank(vet_user):
    old_hash = vet_user.password
    vet_service.update_vet(vet_user.id, {'specialization': 'Dentistry', 'password': ''})
    assert db.session.get(User, vet_user.id).password == old_hash
    vet_service.update_vet(vet_user.id, {'password': 'newpass123'})
    assert user_service.authenticate('victor', 'newpass123')[2] == 200


def test_vet_with_appointments_cannot_be_deleted(owner_user, vet_user, make_pet, make_appointment):
    make_appointment(make_pet(owner_user), vet_user, datetime.datetime(2024, 1, 1, 10))
    body, status = vet_service.delete_vet(vet_user.id)
    assert status == 400
    assert body['message'].startswith('Cannot delete veterinarian')


def test_register_and_login_api(client):
    response = client.post('/auth/register', json={
        'username': 'newbie', 'email': 'newbie@example.com', 'password': PASSWORD, 'fullName': 'New Bie'})
    assert response.status_code == 201
    assert response.get_json()['user']['role'] == 'OWNER'

    response = client.post('/auth/login', json={'username': 'newbie', 'password': PASSWORD})
    assert response.status_code == 200
    token = response.get_json()['access_token']

    response = client.get('/auth/verify', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 200
    assert response.get_json()['user']['username'] == 'newbie'

    response = client.get('/profile', headers={'Authorization': f'Bearer {token}'})
    assert response.get_json()['fullName'] == 'New Bie'


def test_role_gates(client, owner_user, admin_user):
    assert client.get('/admin/users').status_code == 401
    assert client.get('/admin/users', headers=auth_header(owner_user)).status_code == 403
    response = client.get('/admin/users?role=owner', headers=auth_header(admin_user))
    assert response.status_code == 200
    assert [u['username'] for u in response.get_json()] == ['olivia']


def test_blocked_user_token_is_refused(client, owner_user, admin_user):
    headers = auth_header(owner_user)
    assert client.get('/owner/pets', headers=headers).status_code == 200
    client.post(f'/admin/users/{owner_user.id}/toggle-block', headers=auth_header(admin_user))
    response = client.get('/owner/pets', headers=headers)
    assert response.status_code == 403
    assert 'blocked' in response.get_json()['message']
