from datetime import datetime, timezone as dt_timezone

import pytest
from django.urls import reverse

from portal.models import Appointment, MedicalRecord, Patient, User
from portal.tests.factories import make_user

pytestmark = pytest.mark.django_db


def test_patient_is_sent_to_own_record(client_for, patient):
    r = client_for(patient.user).get(reverse('patient-list'))
    target = reverse('records-for-patient', kwargs={'patient_id': patient.pk})
    assert r.status_code == 303
    assert r['Location'] == target
    assert r.data == {'ok': False, 'redirect': target}


def test_patient_without_profile_is_forbidden(client_for):
    user = make_user('ghost@clinic.com', User.ROLE_PATIENT)
    assert client_for(user).get(reverse('patient-list')).status_code == 403


def test_doctor_lists_patients_seen_by_record_or_appointment(client_for, doctor, other_doctor, patient,
                                                             other_patient):
    third = Patient.objects.create(user=make_user('thirdpatient@clinic.com', User.ROLE_PATIENT, full_name='Third'))
    MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='flu')
    Appointment.objects.create(doctor=doctor, patient=other_patient,
                               appointment_date=datetime(2026, 10, 21, 10, tzinfo=dt_timezone.utc))
    MedicalRecord.objects.create(patient=third, doctor=other_doctor, diagnosis='cold')

    r = client_for(doctor.user).get(reverse('patient-list'))
    assert r.status_code == 200
    assert [row['id'] for row in r.data] == [patient.pk, other_patient.pk]


def test_doctor_patient_list_has_no_duplicates(client_for, doctor, patient):
    MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='flu')
    for day in (21, 22):
        Appointment.objects.create(doctor=doctor, patient=patient,
                                   appointment_date=datetime(2026, 10, day, 10, tzinfo=dt_timezone.utc))
    assert len(client_for(doctor.user).get(reverse('patient-list')).data) == 1


def test_admin_and_nurse_see_everyone(client_for, admin_user, nurse, patient, other_patient):
    for user in (admin_user, nurse.user):
        r = client_for(user).get(reverse('patient-list'))
        assert [row['id'] for row in r.data] == [patient.pk, other_patient.pk]


def test_patient_may_open_only_own_profile(client_for, patient, other_patient):
    client = client_for(patient.user)
    assert client.get(reverse('patient-detail', kwargs={'pk': patient.pk})).status_code == 200
    assert client.get(reverse('patient-detail', kwargs={'pk': other_patient.pk})).status_code == 403


def test_admin_registers_patient(client_for, admin_user):
    r = client_for(admin_user).post(reverse('patient-list'), {'full_name': 'Elliot Reid', 'blood_type': 'AB+'},
                                    format='json')
    assert r.status_code == 201, r.data
    assert r.data['username'] == 'elliotreid@clinic.com'


def test_doctor_cannot_register_patient(client_for, doctor):
    r = client_for(doctor.user).post(reverse('patient-list'), {'full_name': 'Not Allowed'}, format='json')
    assert r.status_code == 403


def test_update_with_mismatched_id(client_for, admin_user, patient):
    r = client_for(admin_user).put(reverse('patient-detail', kwargs={'pk': patient.pk}),
                                   {'id': patient.pk + 10, 'full_name': 'John Patient'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'id_mismatch'
