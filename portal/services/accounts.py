"""
Login identities for clinic staff and patients.

When an administrator creates a doctor, nurse or patient, the person
gets an account whose login (and email) is derived from their full
name: whitespace removed, lowercased, at the clinic domain.  The
account starts with the configured default password, a confirmed
email, and ``must_change_password`` set.

Two people with the same normalised name collide on the generated
login; the second provisioning attempt fails with an
:class:`IdentityError` rather than inventing a suffix.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError

from portal.exceptions import IdentityError
from portal.services.audit import log_action

logger = logging.getLogger(__name__)

User = get_user_model()


def generated_login(full_name: str) -> str:
    local = ''.join((full_name or '').split()).lower()
    if not local:
        raise IdentityError({'full_name': ['A full name is required to create an account.']})
    return f"{local}@{settings.CLINIC_EMAIL_DOMAIN}"


def _check_password(password: str, user) -> None:
    try:
        validate_password(password, user)
    except DjangoValidationError as e:
        raise IdentityError({'password': list(e.messages)})


def provision_account(full_name: str, role: str, *, password: str | None = None):
    """Create and return the login identity for a new profile.

    Call inside the caller's unit of work so that a failing profile
    insert also discards the identity.
    """
    login = generated_login(full_name)
    max_length = User._meta.get_field('username').max_length
    if len(login) > max_length:
        raise IdentityError({'username': [f"Generated login is longer than {max_length} characters."]})
    try:
        User.username_validator(login)
    except DjangoValidationError as e:
        raise IdentityError({'username': list(e.messages)})
    if User.objects.filter(username__iexact=login).exists() or User.objects.filter(email__iexact=login).exists():
        logger.warning("Account provisioning refused: %s already exists", login)
        raise IdentityError({'username': [f"Username '{login}' is already taken."]})

    user = User(
        username=login,
        email=login,
        full_name=' '.join(full_name.split()),
        role=role,
        email_confirmed=True,
        must_change_password=True,
    )
    password = password or settings.CLINIC_DEFAULT_PASSWORD
    _check_password(password, user)
    user.set_password(password)
    user.save()
    logger.info("Provisioned %s account %s", role, login)
    return user


def change_password(user, *, current_password: str, new_password: str):
    if not user.check_password(current_password):
        raise IdentityError({'current_password': ['Current password is incorrect.']})
    if current_password == new_password:
        raise IdentityError({'new_password': ['New password must differ from the current one.']})
    _check_password(new_password, user)
    user.set_password(new_password)
    user.must_change_password = False
    user.save(update_fields=['password', 'must_change_password'])
    log_action(user=user, action='change_password', entity_name='User', entity_id=user.pk)
    return user


def ensure_admin(username: str, password: str, *, full_name: str = 'Administrator'):
    """Create or repair the administrator account; returns ``(user, created)``."""
    user, created = User.objects.get_or_create(
        username=username,
        defaults={
            'email': username if '@' in username else '',
            'full_name': full_name,
            'role': User.ROLE_ADMIN,
            'is_staff': True,
            'is_superuser': True,
            'email_confirmed': True,
            'must_change_password': False,
        },
    )
    if created:
        user.set_password(password)
        user.save(update_fields=['password'])
    else:
        changed = []
        for attr, value in (('role', User.ROLE_ADMIN), ('is_active', True), ('is_staff', True), ('is_superuser', True)):
            if getattr(user, attr) != value:
                setattr(user, attr, value)
                changed.append(attr)
        if changed:
            user.save(update_fields=changed)
    return user, created
