import datetime
import pytest
from vetclinic import create_app, db
from vetclinic.config import TestConfig
from vetclinic.models import Role, Pet, Appointment, AppointmentStatus
from vetclinic.services import user_service, owner_service

PASSWORD = 'secret123'


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig, UPLOAD_FOLDER=str(tmp_path / 'uploads'))
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    app.extensions['email_dispatcher'].shutdown(wait=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def dispatcher(app):
    return app.extensions['email_dispatcher']


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make(role=Role.OWNER, username=None, **extra):
        counter['n'] += 1
        username = username or f"{role.value.lower()}{counter['n']}"
        data = {
            'username': username,
            'email': f'{username}@example.com',
            'password': PASSWORD,
            'fullName': extra.pop('fullName', username.title()),
            'address': '1 Main Street',
            'mobile': '5550000000',
        }
        data.update(extra)
        user, error, status = user_service.register_user(data, role=role)
        assert error is None, error
        return user
    return _make


@pytest.fixture
def owner_user(make_user):
    return make_user(Role.OWNER, username='olivia', fullName='Olivia Owner')


@pytest.fixture
def vet_user(make_user):
    return make_user(Role.VETERINARIAN, username='victor', fullName='Victor Vet')


@pytest.fixture
def admin_user(make_user):
    return make_user(Role.ADMIN, username='ada', fullName='Ada Admin')


def identity_of(user):
    return {'id': user.id, 'username': user.username, 'role': user.role.value}


def auth_header(user):
    return {'Authorization': f'Bearer {user_service.create_token_for(user)}'}


@pytest.fixture
def make_pet(app):
    def _make(user, name='Rex', species='Dog'):
        owner = owner_service.find_by_user_id(user.id)
        pet = Pet(name=name, species=species, breed='Mixed', date_of_birth=datetime.date(2020, 5, 1),
                  owner_id=owner.id)
        db.session.add(pet)
        db.session.commit()
        return pet
    return _make


@pytest.fixture
def make_appointment(app):
    def _make(pet, vet, when, status=AppointmentStatus.SCHEDULED, reason='Checkup'):
        appointment = Appointment(owner_id=pet.owner_id, pet_id=pet.id, veterinarian_id=vet.id,
                                  date_time=when, reason=reason, status=status)
        db.session.add(appointment)
        db.session.commit()
        return appointment
    return _make
