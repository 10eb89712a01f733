import datetime
from vetclinic import db
from vetclinic.models import Appointment, AppointmentStatus, Role
from vetclinic.services import prescription_service
from conftest import identity_of, auth_header

CLINICAL = {'symptoms': 'Coughing', 'diagnosis': 'Kennel cough', 'medications': 'Doxycycline 100mg', 'notes': '7 days'}


def test_prescription_creates_completed_appointment(owner_user, vet_user, make_pet):
    pet = make_pet(owner_user)
    data, error, status = prescription_service.create_prescription(
        dict(CLINICAL, petId=pet.id), identity_of(vet_user))
    assert status == 201
    assert data['ownerId'] == owner_user.id
    assert data['veterinarianName'] == 'Victor Vet'
    appointment = db.session.get(Appointment, data['appointmentId'])
    assert appointment.status == AppointmentStatus.COMPLETED
    assert appointment.reason == prescription_service.PRESCRIPTION_APPOINTMENT_REASON
    assert appointment.pet_id == pet.id


def test_prescription_completes_given_appointment(owner_user, vet_user, make_pet, make_appointment):
    pet = make_pet(owner_user)
    appointment = make_appointment(pet, vet_user, datetime.datetime(2024, 1, 1, 10))
    data, error, status = prescription_service.create_prescription(
        dict(CLINICAL, petId=pet.id, appointmentId=appointment.id), identity_of(vet_user))
    assert status == 201
    db.session.refresh(appointment)
    assert appointment.status == AppointmentStatus.COMPLETED
    assert Appointment.query.count() == 1


def test_prescription_requires_clinical_fields(owner_user, vet_user, make_pet):
    pet = make_pet(owner_user)
    data, error, status = prescription_service.create_prescription(
        {'petId': pet.id, 'symptoms': 'Coughing'}, identity_of(vet_user))
    assert status == 400
    assert 'diagnosis' in error['message']
    assert Appointment.query.count() == 0


def test_prescription_visibility(owner_user, vet_user, make_user, make_pet, admin_user):
    pet = make_pet(owner_user)
    created = prescription_service.create_prescription(dict(CLINICAL, petId=pet.id), identity_of(vet_user))[0]
    other_owner = make_user(Role.OWNER)
    other_vet = make_user(Role.VETERINARIAN)

    assert prescription_service.get_prescription(created['id'], identity_of(owner_user))[2] == 200
    assert prescription_service.get_prescription(created['id'], identity_of(admin_user))[2] == 200
    assert prescription_service.get_prescription(created['id'], identity_of(other_owner))[2] == 403
    assert prescription_service.get_prescription(created['id'], identity_of(other_vet))[2] == 403
    assert prescription_service.get_prescription(9999, identity_of(owner_user))[2] == 404

    assert len(prescription_service.get_prescriptions_by_owner(identity_of(owner_user))) == 1
    assert prescription_service.get_prescriptions_by_owner(identity_of(other_owner)) == []


def test_only_author_edits(owner_user, vet_user, make_user, make_pet):
    pet = make_pet(owner_user)
    created = prescription_service.create_prescription(dict(CLINICAL, petId=pet.id), identity_of(vet_user))[0]
    other_vet = make_user(Role.VETERINARIAN)

    assert prescription_service.update_prescription(
        created['id'], {'diagnosis': 'Bronchitis'}, identity_of(other_vet))[2] == 403
    data, error, status = prescription_service.update_prescription(
        created['id'], {'diagnosis': 'Bronchitis', 'notes': 'Recheck in 2 weeks'}, identity_of(vet_user))
    assert status == 200
    assert data['diagnosis'] == 'Bronchitis'
    assert data['symptoms'] == 'Coughing'


def test_prescription_api(client, owner_user, vet_user, make_pet):
    pet = make_pet(owner_user)
    response = client.post('/vet/prescriptions', json=dict(CLINICAL, petId=pet.id), headers=auth_header(vet_user))
    assert response.status_code == 201
    prescription_id = response.get_json()['prescription']['id']

    response = client.get(f'/owner/prescriptions/{prescription_id}', headers=auth_header(owner_user))
    assert response.status_code == 200
    assert response.get_json()['medications'] == 'Doxycycline 100mg'

    response = client.get('/vet/prescriptions', headers=auth_header(vet_user))
    assert len(response.get_json()) == 1
