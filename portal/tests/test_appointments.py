from datetime import datetime, timezone as dt_timezone

import pytest
from django.urls import reverse

from portal.models import Appointment
from portal.services import appointments, notifications

pytestmark = pytest.mark.django_db

WHEN = datetime(2026, 10, 20, 9, 30, tzinfo=dt_timezone.utc)


def book(doctor, patient, when=WHEN, **extra):
    return Appointment.objects.create(doctor=doctor, patient=patient, appointment_date=when, **extra)


def payload(doctor, patient):
    return {'doctor': str(doctor.pk), 'patient': patient.pk, 'appointment_date': '2026-10-20T09:30:00Z',
            'notes': 'Follow-up'}


def test_create_mails_patient_after_commit(client_for, nurse, doctor, patient, mailoutbox,
                                           django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        r = client_for(nurse.user).post(reverse('appointment-list'), payload(doctor, patient), format='json')
    assert r.status_code == 201, r.data
    assert r.data['status'] == 'Scheduled'
    assert len(mailoutbox) == 1
    mail = mailoutbox[0]
    assert mail.to == [patient.user.email]
    assert mail.subject == appointments.CONFIRMATION_SUBJECT
    assert 'Dr. Gregory House' in mail.body
    assert 'Follow-up' in mail.body


def test_mail_failure_keeps_appointment(client_for, admin_user, doctor, patient, monkeypatch,
                                        django_capture_on_commit_callbacks):
    def broken(*args, **kwargs):
        raise ConnectionRefusedError('smtp down')
    monkeypatch.setattr(notifications, 'send_mail', broken)
    with django_capture_on_commit_callbacks(execute=True):
        r = client_for(admin_user).post(reverse('appointment-list'), payload(doctor, patient), format='json')
    assert r.status_code == 201
    assert Appointment.objects.filter(pk=r.data['id']).exists()


def test_patient_cannot_book(client_for, doctor, patient):
    r = client_for(patient.user).post(reverse('appointment-list'), payload(doctor, patient), format='json')
    assert r.status_code == 403
    assert Appointment.objects.count() == 0


def test_lists_are_scoped_by_role(client_for, admin_user, doctor, other_doctor, patient, other_patient):
    mine = book(doctor, patient)
    theirs = book(other_doctor, other_patient)
    url = reverse('appointment-list')

    assert [a['id'] for a in client_for(doctor.user).get(url).data] == [mine.pk]
    assert [a['id'] for a in client_for(other_patient.user).get(url).data] == [theirs.pk]
    assert len(client_for(admin_user).get(url).data) == 2


def test_list_honours_date_window(client_for, admin_user, doctor, patient):
    book(doctor, patient)
    book(doctor, patient, when=datetime(2026, 11, 2, 9, tzinfo=dt_timezone.utc))
    r = client_for(admin_user).get(reverse('appointment-list'), {'start': '2026-11-01', 'end': '2026-11-30'})
    assert len(r.data) == 1


def test_patient_cannot_open_someone_elses_appointment(client_for, doctor, patient, other_patient):
    appointment = book(doctor, other_patient)
    url = reverse('appointment-detail', kwargs={'pk': appointment.pk})
    assert client_for(patient.user).get(url).status_code == 403
    assert client_for(other_patient.user).get(url).status_code == 200


def test_doctor_filter_stays_within_scope(client_for, doctor, other_doctor, patient):
    book(other_doctor, patient)
    r = client_for(doctor.user).get(reverse('appointments-by-doctor', kwargs={'doctor_id': other_doctor.pk}))
    assert r.status_code == 200
    assert r.data == []


def test_update_and_delete(client_for, nurse, doctor, patient):
    appointment = book(doctor, patient)
    client = client_for(nurse.user)
    url = reverse('appointment-detail', kwargs={'pk': appointment.pk})
    r = client.patch(url, {'status': 'Completed'}, format='json')
    assert r.status_code == 200, r.data
    assert r.data['status'] == 'Completed'
    assert client.delete(url).status_code == 204
    assert client.get(url).status_code == 404


def test_calendar_lists_visible_events(client_for, doctor, other_doctor, patient, other_patient):
    mine = book(doctor, patient)
    book(other_doctor, other_patient)
    events = client_for(doctor.user).get(reverse('calendar')).data
    assert len(events) == 1
    event = events[0]
    assert event['id'] == mine.pk
    assert event['doctorId'] == str(doctor.pk)
    assert event['title'] == 'John Patient / Dr. Gregory House'
