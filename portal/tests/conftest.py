import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from portal.models import Department, Doctor, Nurse, Patient, Room, User
from portal.tests.factories import make_user


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters and cached lists live in the default cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    return make_user('admin@clinic.com', User.ROLE_ADMIN, full_name='Ada Admin')


@pytest.fixture
def doctor(db):
    user = make_user('gregoryhouse@clinic.com', User.ROLE_DOCTOR, full_name='Gregory House')
    return Doctor.objects.create(user=user, profession='Diagnostics', years_of_experience=20)


@pytest.fixture
def other_doctor(db):
    user = make_user('lisacuddy@clinic.com', User.ROLE_DOCTOR, full_name='Lisa Cuddy')
    return Doctor.objects.create(user=user, profession='Endocrinology', years_of_experience=15)


@pytest.fixture
def nurse(db):
    user = make_user('carlaespinosa@clinic.com', User.ROLE_NURSE, full_name='Carla Espinosa')
    return Nurse.objects.create(user=user, phone_number='555-0101')


@pytest.fixture
def patient(db):
    user = make_user('johnpatient@clinic.com', User.ROLE_PATIENT, full_name='John Patient')
    return Patient.objects.create(user=user, gender='M', blood_type='O+')


@pytest.fixture
def other_patient(db):
    user = make_user('janepatient@clinic.com', User.ROLE_PATIENT, full_name='Jane Patient')
    return Patient.objects.create(user=user, gender='F', blood_type='A-')


@pytest.fixture
def department(db):
    return Department.objects.create(name='Emergency', description='ER')


@pytest.fixture
def room(department):
    return Room.objects.create(room_number='E-101', room_type='Trauma', department=department)


@pytest.fixture
def client_for():
    """``client_for(user)`` returns an APIClient authenticated as ``user``."""
    def _make(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c
    return _make
