import datetime
import pytest
from vetclinic import db
from vetclinic.models import Appointment, AppointmentStatus, Role
from vetclinic.services import appointment_service, reminder_service
from vetclinic.utils import parse_date_time
from conftest import identity_of, auth_header

DAY = datetime.datetime(2024, 1, 1)


def at(hour, minute=0):
    return DAY.replace(hour=hour, minute=minute)


def book(owner_user, pet, vet, when, reason='Checkup'):
    return appointment_service.book_appointment(
        {'petId': pet.id, 'veterinarianId': vet.id, 'dateTime': when.isoformat(), 'reason': reason},
        identity_of(owner_user))


def test_booking_conflict_scenario(owner_user, vet_user, make_pet):
    pet = make_pet(owner_user)

    data, error, status = book(owner_user, pet, vet_user, at(10, 0))
    assert status == 201
    assert data['status'] == AppointmentStatus.SCHEDULED

    data, error, status = book(owner_user, pet, vet_user, at(10, 20))
    assert status == 409
    assert error['message'] == appointment_service.BOOKING_CONFLICT_MESSAGE

    data, error, status = book(owner_user, pet, vet_user, at(10, 31))
    assert status == 201
    assert Appointment.query.filter_by(veterinarian_id=vet_user.id).count() == 2


@pytest.mark.parametrize('minute_offset,conflicts', [(-29, True), (29, True), (-30, False), (30, False)])
def test_conflict_window_is_inclusive_29_minutes(owner_user, vet_user, make_pet, make_appointment,
                                                 minute_offset, conflicts):
    pet = make_pet(owner_user)
    make_appointment(pet, vet_user, at(10))
    candidate = at(10) + datetime.timedelta(minutes=minute_offset)
    assert bool(appointment_service.find_conflicts(vet_user.id, candidate)) is conflicts


def test_cancelled_appointments_do_not_block(owner_user, vet_user, make_pet, make_appointment):
    pet = make_pet(owner_user)
    make_appointment(pet, vet_user, at(10), status=AppointmentStatus.CANCELLED)
    data, error, status = book(owner_user, pet, vet_user, at(10, 5))
    assert status == 201


def test_other_vet_same_slot_is_free(owner_user, vet_user, make_user, make_pet):
    other_vet = make_user(Role.VETERINARIAN)
    pet = make_pet(owner_user)
    assert book(owner_user, pet, vet_user, at(10))[2] == 201
    assert book(owner_user, pet, other_vet, at(10))[2] == 201


def test_cannot_book_for_someone_elses_pet(owner_user, vet_user, make_user, make_pet):
    stranger = make_user(Role.OWNER)
    pet = make_pet(stranger)
    data, error, status = book(owner_user, pet, vet_user, at(9))
    assert status == 403


def test_booking_validation(owner_user, vet_user, make_pet):
    pet = make_pet(owner_user)
    identity = identity_of(owner_user)
    assert appointment_service.book_appointment({'petId': pet.id}, identity)[2] == 400
    assert appointment_service.book_appointment(
        {'petId': pet.id, 'veterinarianId': vet_user.id, 'dateTime': 'next tuesday'}, identity)[2] == 400
    assert appointment_service.book_appointment(
        {'petId': 999, 'veterinarianId': vet_user.id, 'dateTime': '2024-01-01T10:00'}, identity)[2] == 404
    assert appointment_service.book_appointment(
        {'petId': pet.id, 'veterinarianId': owner_user.id, 'dateTime': '2024-01-01T10:00'}, identity)[2] == 404


def test_booking_queues_confirmations(owner_user, vet_user, make_pet, dispatcher):
    pet = make_pet(owner_user)
    book(owner_user, pet, vet_user, at(10))
    assert dispatcher.wait(timeout=5)
    subjects = sorted(m['subject'] for m in dispatcher.outbox)
    assert subjects == [
        'Appointment Confirmation - Rex scheduled for Jan 01, 2024 at 10:00 AM',
        'New Appointment Confirmation - Rex with Olivia Owner',
    ]
    recipients = {m['to'] for m in dispatcher.outbox}
    assert recipients == {owner_user.email, vet_user.email}


def test_notification_failure_does_not_fail_booking(owner_user, vet_user, make_pet, monkeypatch):
    def boom(appointment_id):
        raise RuntimeError('smtp down')
    monkeypatch.setattr(reminder_service, 'send_immediate_confirmation', boom)
    pet = make_pet(owner_user)
    data, error, status = book(owner_user, pet, vet_user, at(10))
    assert status == 201
    assert db.session.get(Appointment, data['id']) is not None


def test_reschedule_only_scheduled(owner_user, vet_user, make_pet, make_appointment):
    pet = make_pet(owner_user)
    appointment = make_appointment(pet, vet_user, at(10), status=AppointmentStatus.COMPLETED)
    data, error, status = appointment_service.reschedule_appointment(
        appointment.id, {'dateTime': at(15).isoformat()}, identity_of(owner_user))
    assert status == 400
    assert error['message'] == 'Only scheduled appointments can be edited.'
    db.session.refresh(appointment)
    assert appointment.date_time == at(10)
    assert appointment.status == AppointmentStatus.COMPLETED


def test_reschedule_excludes_itself(owner_user, vet_user, make_pet, make_appointment):
    pet = make_pet(owner_user)
    appointment = make_appointment(pet, vet_user, at(10))
    data, error, status = appointment_service.reschedule_appointment(
        appointment.id, {'dateTime': at(10, 15).isoformat()}, identity_of(owner_user))
    assert status == 200
    assert data['dateTime'] == at(10, 15).isoformat()


def test_reschedule_conflict_leaves_row_untouched(owner_user, vet_user, make_pet, make_appointment):
    pet = make_pet(owner_user)
    make_appointment(pet, vet_user, at(10))
    moving = make_appointment(pet, vet_user, at(14))
    data, error, status = appointment_service.reschedule_appointment(
        moving.id, {'dateTime': at(10, 20).isoformat()}, identity_of(owner_user))
    assert status == 409
    assert error['message'] == appointment_service.RESCHEDULE_CONFLICT_MESSAGE
    db.session.refresh(moving)
    assert moving.date_time == at(14)


def test_complete_and_cancel(owner_user, vet_user, make_pet, make_appointment):
    pet = make_pet(owner_user)
    first = make_appointment(pet, vet_user, at(10))
    second = make_appointment(pet, vet_user, at(12))

    data, error, status = appointment_service.complete_appointment(first.id, identity_of(vet_user))
    assert status == 200 and data['status'] == AppointmentStatus.COMPLETED
    data, error, status = appointment_service.complete_appointment(first.id, identity_of(vet_user))
    assert status == 400
    assert error['message'] == 'Appointment not found or not in scheduled state.'

    data, error, status = appointment_service.cancel_appointment(second.id, identity_of(owner_user))
    assert status == 200 and data['status'] == AppointmentStatus.CANCELLED


def test_listing_groups_and_calendar(owner_user, vet_user, make_pet, make_appointment):
    pet = make_pet(owner_user)
    make_appointment(pet, vet_user, at(9))
    make_appointment(pet, vet_user, at(11), status=AppointmentStatus.COMPLETED)
    make_appointment(pet, vet_user, at(13), status=AppointmentStatus.CANCELLED)

    grouped, error, status = appointment_service.get_owner_appointments(identity_of(owner_user))
    assert [len(grouped[k]) for k in ('upcoming', 'completed', 'cancelled')] == [1, 1, 1]

    events = appointment_service.get_vet_calendar(identity_of(vet_user))
    assert len(events) == 1
    assert events[0]['title'] == 'Rex - Olivia Owner'
    assert events[0]['allDay'] is False


def test_book_through_api(client, owner_user, vet_user, make_pet):
    pet = make_pet(owner_user)
    payload = {'petId': pet.id, 'veterinarianId': vet_user.id, 'dateTime': '2024-01-01T10:00'}
    response = client.post('/owner/appointments/book', json=payload, headers=auth_header(owner_user))
    assert response.status_code == 201
    assert response.get_json()['appointment']['petName'] == 'Rex'

    payload['dateTime'] = '2024-01-01T10:20'
    response = client.post('/owner/appointments/book', json=payload, headers=auth_header(owner_user))
    assert response.status_code == 409

    response = client.post('/owner/appointments/book', json=payload, headers=auth_header(vet_user))
    assert response.status_code == 403


def test_offsets_are_converted_to_local_time():
    utc = parse_date_time('2024-01-01T10:00:00Z')
    plus_two = parse_date_time('2024-01-01T10:00:00+02:00')
    assert utc.tzinfo is None and plus_two.tzinfo is None
    assert utc - plus_two == datetime.timedelta(hours=2)
    expected = datetime.datetime(2024, 1, 1, 10, tzinfo=datetime.timezone.utc).astimezone().replace(tzinfo=None)
    assert utc == expected
    assert parse_date_time('2024-01-01T10:00') == datetime.datetime(2024, 1, 1, 10)


def test_different_offsets_do_not_share_a_slot(owner_user, vet_user, make_pet):
    pet = make_pet(owner_user)
    identity = identity_of(owner_user)
    first = appointment_service.book_appointment(
        {'petId': pet.id, 'veterinarianId': vet_user.id, 'dateTime': '2024-01-01T10:00:00Z'}, identity)
    second = appointment_service.book_appointment(
        {'petId': pet.id, 'veterinarianId': vet_user.id, 'dateTime': '2024-01-01T10:00:00+02:00'}, identity)
    assert first[2] == 201
    assert second[2] == 201
