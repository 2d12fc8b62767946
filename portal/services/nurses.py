from __future__ import annotations

import logging

from portal.models import Nurse, User
from portal.services.accounts import provision_account
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def list_nurses():
    return UnitOfWork().nurses.list_all().order_by('user__full_name', 'user__username')


def get_nurse(pk):
    return UnitOfWork().nurses.get_by_id(pk)


def create_nurse(actor, data: dict) -> Nurse:
    data = dict(data)
    full_name = data.pop('full_name')
    with UnitOfWork() as uow:
        user = provision_account(full_name, User.ROLE_NURSE)
        nurse = uow.nurses.add(Nurse(user=user, **data))
        log_action(user=actor, action='create', entity_name='Nurse', entity_id=nurse.pk,
                   details={'login': user.username})
    logger.info("Nurse %s created for %s", nurse.pk, user.username)
    return nurse


def update_nurse(actor, pk, data: dict) -> Nurse:
    data = dict(data)
    full_name = data.pop('full_name', None)
    with UnitOfWork() as uow:
        nurse = found(uow.nurses.get_by_id(pk), 'Nurse', pk)
        uow.nurses.update(apply_changes(nurse, data, preserve=('id', 'user_id', 'created_at')))
        if full_name:
            nurse.user.full_name = ' '.join(full_name.split())
            nurse.user.save(update_fields=['full_name'])
        log_action(user=actor, action='update', entity_name='Nurse', entity_id=pk)
    return nurse


def delete_nurse(actor, pk) -> None:
    with UnitOfWork() as uow:
        nurse = found(uow.nurses.get_by_id(pk), 'Nurse', pk)
        user = nurse.user
        uow.nurses.delete(nurse)
        uow.users.delete(user)
        log_action(user=actor, action='delete', entity_name='Nurse', entity_id=pk)
