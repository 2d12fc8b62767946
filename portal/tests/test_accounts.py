import pytest
from django.test import override_settings
from django.urls import reverse

from portal.exceptions import IdentityError
from portal.models import Doctor, Nurse, Patient, User
from portal.services import accounts, doctors, nurses, patients

pytestmark = pytest.mark.django_db


def test_generated_login_strips_spaces_and_lowercases():
    assert accounts.generated_login('  Mary  Jane Watson ') == 'maryjanewatson@clinic.com'


@override_settings(CLINIC_EMAIL_DOMAIN='usal.example')
def test_generated_login_uses_configured_domain():
    assert accounts.generated_login('Al Bo') == 'albo@usal.example'


def test_provisioned_account_defaults():
    user = accounts.provision_account('Meredith Grey', User.ROLE_DOCTOR)
    assert user.username == user.email == 'meredithgrey@clinic.com'
    assert user.role == User.ROLE_DOCTOR
    assert user.email_confirmed
    assert user.must_change_password
    assert user.check_password('U@u123456')


def test_create_doctor_links_profile_to_new_identity(admin_user, department):
    doctor = doctors.create_doctor(admin_user, {'full_name': 'Derek Shepherd', 'profession': 'Neurosurgery',
                                                'departments': [department]})
    assert doctor.user.username == 'derekshepherd@clinic.com'
    assert doctor.user.role == User.ROLE_DOCTOR
    assert list(doctor.departments.all()) == [department]


def test_duplicate_name_leaves_no_orphan_profile(admin_user):
    patients.create_patient(admin_user, {'full_name': 'Sam Smith'})
    with pytest.raises(IdentityError) as exc:
        patients.create_patient(admin_user, {'full_name': 'sam smith'})
    assert 'username' in exc.value.errors
    assert Patient.objects.count() == 1
    assert User.objects.filter(username='samsmith@clinic.com').count() == 1


def test_failed_profile_insert_rolls_back_identity(admin_user, monkeypatch):
    def boom(self, obj):
        raise RuntimeError('insert failed')
    monkeypatch.setattr('portal.repositories.NurseRepository.add', boom)
    with pytest.raises(RuntimeError):
        nurses.create_nurse(admin_user, {'full_name': 'Lost Nurse'})
    assert not User.objects.filter(username='lostnurse@clinic.com').exists()
    assert Nurse.objects.count() == 0


def test_api_duplicate_doctor_returns_identity_errors(client_for, admin_user):
    client = client_for(admin_user)
    payload = {'full_name': 'Chris Turk', 'profession': 'Surgery'}
    assert client.post(reverse('doctor-list'), payload, format='json').status_code == 201
    r = client.post(reverse('doctor-list'), payload, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'identity_error'
    assert 'username' in r.data['error']['message']
    assert Doctor.objects.count() == 1


def test_delete_doctor_removes_login(admin_user):
    doctor = doctors.create_doctor(admin_user, {'full_name': 'Perry Cox', 'profession': 'Internal'})
    user_id = doctor.user_id
    doctors.delete_doctor(admin_user, doctor.pk)
    assert not User.objects.filter(pk=user_id).exists()


def test_change_password_clears_flag():
    user = accounts.provision_account('New Hire', User.ROLE_NURSE)
    accounts.change_password(user, current_password='U@u123456', new_password='Brand#New2026')
    user.refresh_from_db()
    assert not user.must_change_password
    assert user.check_password('Brand#New2026')


def test_change_password_rejects_wrong_current():
    user = accounts.provision_account('Wrong Guess', User.ROLE_NURSE)
    with pytest.raises(IdentityError):
        accounts.change_password(user, current_password='nope', new_password='Brand#New2026')


def test_must_change_password_blocks_portal_until_changed(client_for):
    user = accounts.provision_account('Fresh Doctor', User.ROLE_DOCTOR)
    client = client_for(user)
    r = client.get(reverse('department-list'))
    assert r.status_code == 403
    assert 'Password change required' in r.data['error']['message']

    r = client.post(reverse('auth-change-password'),
                    {'current_password': 'U@u123456', 'new_password': 'Brand#New2026'}, format='json')
    assert r.status_code == 200
    user.refresh_from_db()
    client.force_authenticate(user=user)
    assert client.get(reverse('department-list')).status_code == 200


def test_ensure_admin_is_idempotent():
    user, created = accounts.ensure_admin('root@clinic.com', 'Root#Pass2026')
    assert created and user.role == User.ROLE_ADMIN and user.check_password('Root#Pass2026')
    again, created_again = accounts.ensure_admin('root@clinic.com', 'ignored')
    assert not created_again
    assert again.pk == user.pk
    assert again.check_password('Root#Pass2026')


def test_ensure_admin_command(capsys):
    from django.core.management import call_command
    call_command('ensure_admin', '--username', 'boss@clinic.com', '--password', 'Boss#Pass2026')
    assert User.objects.get(username='boss@clinic.com').is_superuser
    assert 'created' in capsys.readouterr().out
