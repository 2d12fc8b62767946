from __future__ import annotations

import logging

from portal.models import Doctor, User
from portal.services.accounts import provision_account
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def list_doctors():
    return UnitOfWork().doctors.list_all().order_by('user__full_name', 'user__username')


def get_doctor(pk):
    return UnitOfWork().doctors.get_by_id(pk)


def create_doctor(actor, data: dict) -> Doctor:
    """Provision the login identity, then the doctor profile, in one transaction."""
    data = dict(data)
    full_name = data.pop('full_name')
    departments = data.pop('departments', None) or []
    with UnitOfWork() as uow:
        user = provision_account(full_name, User.ROLE_DOCTOR)
        doctor = uow.doctors.add(Doctor(user=user, **data))
        if departments:
            doctor.departments.add(*departments)
        log_action(user=actor, action='create', entity_name='Doctor', entity_id=doctor.pk,
                   details={'login': user.username})
    logger.info("Doctor %s created for %s", doctor.pk, user.username)
    return doctor


def update_doctor(actor, pk, data: dict) -> Doctor:
    data = dict(data)
    full_name = data.pop('full_name', None)
    departments = data.pop('departments', None)
    with UnitOfWork() as uow:
        doctor = found(uow.doctors.get_by_id(pk), 'Doctor', pk)
        uow.doctors.update(apply_changes(doctor, data, preserve=('id', 'user_id')))
        if full_name:
            doctor.user.full_name = ' '.join(full_name.split())
            doctor.user.save(update_fields=['full_name'])
        if departments is not None:
            doctor.departments.set(departments)
        log_action(user=actor, action='update', entity_name='Doctor', entity_id=pk)
    return doctor


def delete_doctor(actor, pk) -> None:
    """Remove the profile together with its login identity."""
    with UnitOfWork() as uow:
        doctor = found(uow.doctors.get_by_id(pk), 'Doctor', pk)
        user = doctor.user
        uow.doctors.delete(doctor)
        uow.users.delete(user)
        log_action(user=actor, action='delete', entity_name='Doctor', entity_id=pk)
    logger.info("Doctor %s deleted", pk)
