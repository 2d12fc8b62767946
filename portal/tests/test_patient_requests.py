import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from portal.exceptions import ConflictError
from portal.models import Patient, PatientRequest, User
from portal.services import patient_requests

pytestmark = pytest.mark.django_db


def submit(**extra):
    payload = {'full_name': 'Rosa Diaz', 'user_name': 'rosa@example.org', 'gender': 'F', **extra}
    return APIClient().post(reverse('patient-request-list'), payload, format='json')


def test_anonymous_visitor_can_submit():
    r = submit()
    assert r.status_code == 201, r.data
    assert r.data['status'] == PatientRequest.STATUS_PENDING
    assert PatientRequest.objects.get(pk=r.data['id']).full_name == 'Rosa Diaz'


def test_submit_rejects_one_letter_name():
    assert submit(full_name=' x ').status_code == 400


def test_approve_provisions_patient_and_mails_requester(client_for, admin_user, mailoutbox,
                                                        django_capture_on_commit_callbacks):
    pending = PatientRequest.objects.create(full_name='Rosa Diaz', user_name='rosa@example.org',
                                            blood_type='B+')
    with django_capture_on_commit_callbacks(execute=True):
        r = client_for(admin_user).post(reverse('patient-request-approve', kwargs={'pk': pending.pk}))
    assert r.status_code == 200, r.data

    pending.refresh_from_db()
    assert pending.status == PatientRequest.STATUS_APPROVED
    assert pending.decided_by == admin_user
    patient = Patient.objects.select_related('user').get(pk=pending.patient_id)
    assert patient.user.username == 'rosadiaz@clinic.com'
    assert patient.user.role == User.ROLE_PATIENT
    assert patient.blood_type == 'B+'

    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ['rosa@example.org']
    assert mailoutbox[0].subject == patient_requests.APPROVED_SUBJECT
    assert 'rosadiaz@clinic.com' in mailoutbox[0].body


def test_approving_twice_changes_nothing(admin_user):
    pending = PatientRequest.objects.create(full_name='Jake Peralta', user_name='jake@example.org')
    first = patient_requests.approve_request(admin_user, pending.pk)
    second = patient_requests.approve_request(admin_user, pending.pk)
    assert second.patient_id == first.patient_id
    assert Patient.objects.count() == 1


def test_approving_rejected_request_conflicts(client_for, admin_user):
    rejected = PatientRequest.objects.create(full_name='Gina Linetti', user_name='gina@example.org',
                                             status=PatientRequest.STATUS_REJECTED)
    r = client_for(admin_user).post(reverse('patient-request-approve', kwargs={'pk': rejected.pk}))
    assert r.status_code == 409
    assert not User.objects.filter(username='ginalinetti@clinic.com').exists()


def test_rejecting_approved_request_conflicts(admin_user):
    pending = PatientRequest.objects.create(full_name='Amy Santiago', user_name='amy@example.org')
    patient_requests.approve_request(admin_user, pending.pk)
    with pytest.raises(ConflictError):
        patient_requests.reject_request(admin_user, pending.pk)


def test_reject_is_idempotent(admin_user, mailoutbox, django_capture_on_commit_callbacks):
    pending = PatientRequest.objects.create(full_name='Hitchcock', user_name='hitch@example.org')
    with django_capture_on_commit_callbacks(execute=True):
        patient_requests.reject_request(admin_user, pending.pk)
    with django_capture_on_commit_callbacks(execute=True):
        again = patient_requests.reject_request(admin_user, pending.pk)
    assert again.status == PatientRequest.STATUS_REJECTED
    assert len(mailoutbox) == 1
    assert mailoutbox[0].subject == patient_requests.REJECTED_SUBJECT


def test_review_is_admin_only_and_filters_by_status(client_for, admin_user, nurse):
    PatientRequest.objects.create(full_name='Pending One', user_name='p1@example.org')
    PatientRequest.objects.create(full_name='Rejected One', user_name='r1@example.org',
                                  status=PatientRequest.STATUS_REJECTED)
    assert client_for(nurse.user).get(reverse('patient-request-list')).status_code == 403

    client = client_for(admin_user)
    assert len(client.get(reverse('patient-request-list')).data) == 2
    r = client.get(reverse('patient-request-list'), {'status': 'pending'})
    assert [row['full_name'] for row in r.data] == ['Pending One']
    assert client.get(reverse('patient-request-list'), {'status': 'bogus'}).status_code == 400


def test_approve_unknown_request_is_404(client_for, admin_user):
    r = client_for(admin_user).post(reverse('patient-request-approve', kwargs={'pk': 777}))
    assert r.status_code == 404
