"""
Patient profiles.

Visibility of the patient list depends on the caller: administrators
and nurses see everyone, doctors see the patients they have a record or
an appointment with, patients are sent to their own record instead.
"""
from __future__ import annotations

import logging

from portal import access
from portal.exceptions import ConflictError
from portal.models import Patient, User
from portal.services.accounts import provision_account
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def visible_patients(principal: access.Principal):
    """Patients the caller may list.

    Raises :class:`~portal.exceptions.AccessDenied`; for patients the
    error's ``target`` is their own patient id.
    """
    decision = access.resolve(principal, access.LIST_PATIENTS).require()
    uow = UnitOfWork()
    if decision.outcome == access.SCOPED:
        return uow.patients.visible_to_doctor_user(decision.scope['doctor_user_id'])
    return uow.patients.list_all().order_by('id')


def get_patient(pk):
    return UnitOfWork().patients.get_by_id(pk)


def get_patient_for(principal: access.Principal, pk) -> Patient:
    access.resolve(principal, access.VIEW_PATIENT, pk).require()
    return found(UnitOfWork().patients.get_by_id(pk), 'Patient', pk)


def add_profile(uow: UnitOfWork, user, data: dict) -> Patient:
    """Attach a patient profile to ``user``; one profile per identity."""
    if uow.patients.by_user_id(user.pk) is not None:
        logger.warning("Patient profile for user %s already exists", user.pk)
        raise ConflictError('A patient profile already exists for this user.')
    return uow.patients.add(Patient(user=user, **data))


def create_patient(actor, data: dict) -> Patient:
    data = dict(data)
    full_name = data.pop('full_name')
    with UnitOfWork() as uow:
        user = provision_account(full_name, User.ROLE_PATIENT)
        patient = add_profile(uow, user, data)
        log_action(user=actor, action='create', entity_name='Patient', entity_id=patient.pk,
                   details={'login': user.username})
    logger.info("Patient %s created for %s", patient.pk, user.username)
    return patient


def update_patient(actor, pk, data: dict) -> Patient:
    data = dict(data)
    full_name = data.pop('full_name', None)
    with UnitOfWork() as uow:
        patient = found(uow.patients.get_by_id(pk), 'Patient', pk)
        uow.patients.update(apply_changes(patient, data, preserve=('id', 'user_id')))
        if full_name:
            patient.user.full_name = ' '.join(full_name.split())
            patient.user.save(update_fields=['full_name'])
        log_action(user=actor, action='update', entity_name='Patient', entity_id=pk)
    return patient


def delete_patient(actor, pk) -> None:
    with UnitOfWork() as uow:
        patient = found(uow.patients.get_by_id(pk), 'Patient', pk)
        user = patient.user
        uow.patients.delete(patient)
        uow.users.delete(user)
        log_action(user=actor, action='delete', entity_name='Patient', entity_id=pk)
    logger.info("Patient %s deleted", pk)
