from datetime import datetime, timezone as dt_timezone

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from portal.models import Appointment, PatientRequest

pytestmark = pytest.mark.django_db


def test_dashboard_counts(client_for, admin_user, doctor, nurse, patient, department):
    Appointment.objects.create(doctor=doctor, patient=patient,
                               appointment_date=datetime(2026, 10, 22, 11, tzinfo=dt_timezone.utc))
    PatientRequest.objects.create(full_name='Waiting Person', user_name='wait@example.org')
    r = client_for(admin_user).get(reverse('dashboard'))
    assert r.status_code == 200
    assert r.data['counts'] == {'appointments': 1, 'patients': 1, 'doctors': 1, 'nurses': 1,
                                'pendingRequests': 1}
    assert [d['name'] for d in r.data['departments']] == ['Emergency']
    assert len(r.data['events']) == 1


def test_dashboard_is_admin_only(client_for, doctor):
    assert client_for(doctor.user).get(reverse('dashboard')).status_code == 403


def test_audit_log_listing(client_for, admin_user, department):
    client = client_for(admin_user)
    client.patch(reverse('department-detail', kwargs={'pk': department.pk}), {'description': 'A&E'},
                 format='json')
    r = client.get(reverse('audit-log-list'), {'entity': 'Department'})
    assert r.status_code == 200
    assert [row['action'] for row in r.data] == ['update']


def test_healthz_is_public():
    r = APIClient().get(reverse('healthz'))
    assert r.status_code == 200
    assert r.json()['ok'] is True
