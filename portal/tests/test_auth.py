import pytest
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken

from portal.models import AuditLog, User
from portal.services.accounts import provision_account
from portal.tests.factories import PASSWORD, make_user

pytestmark = pytest.mark.django_db


def login(username, password):
    return APIClient().post(reverse('auth-login'), {'username': username, 'password': password}, format='json')


def test_login_returns_both_token_kinds(nurse):
    r = login(nurse.user.username, PASSWORD)
    assert r.status_code == 200, r.data
    assert r.data['ok'] is True
    assert r.data['token'] and r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['role'] == User.ROLE_NURSE
    assert r.data['must_change_password'] is False
    assert r.data['user']['name'] == 'Carla Espinosa'


def test_login_flags_generated_password():
    user = provision_account('Fresh Face', User.ROLE_PATIENT)
    r = login(user.username, 'U@u123456')
    assert r.status_code == 200
    assert r.data['must_change_password'] is True


def test_bad_credentials_are_rejected_and_audited(nurse):
    r = login(nurse.user.username, 'wrong-password')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid_credentials'
    assert AuditLog.objects.filter(action='login_failed').exists()


def test_token_authenticates_requests(department):
    user = make_user('tokenadmin@clinic.com', User.ROLE_ADMIN)
    token = login(user.username, PASSWORD).data['token']
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
    assert client.get(reverse('department-list')).status_code == 200


def test_jwt_authenticates_requests(department, nurse):
    access = login(nurse.user.username, PASSWORD).data['jwt_access']
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
    assert client.get(reverse('department-list')).status_code == 200


def test_anonymous_requests_are_unauthorized():
    assert APIClient().get(reverse('department-list')).status_code == 401


def test_refresh_issues_new_access_token(nurse):
    refresh = login(nurse.user.username, PASSWORD).data['jwt_refresh']
    r = APIClient().post(reverse('auth-refresh'), {'refresh': refresh}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']


def test_refresh_with_garbage_token():
    r = APIClient().post(reverse('auth-refresh'), {'refresh': 'not-a-token'}, format='json')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'token_not_valid'


def test_logout_blacklists_refresh_and_drops_token(nurse):
    data = login(nurse.user.username, PASSWORD).data
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    r = client.post(reverse('auth-logout'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 1
    assert BlacklistedToken.objects.count() == 1

    again = APIClient().post(reverse('auth-refresh'), {'refresh': data['jwt_refresh']}, format='json')
    assert again.status_code == 401
    assert client.get(reverse('department-list')).status_code == 401


def test_logout_without_refresh_blacklists_everything(client_for, nurse):
    login(nurse.user.username, PASSWORD)
    login(nurse.user.username, PASSWORD)
    r = client_for(nurse.user).post(reverse('auth-logout'), {}, format='json')
    assert r.data['blacklisted'] == 2
