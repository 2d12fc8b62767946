"""
Prescriptions attached to medical records.

Administrators manage prescriptions directly.  The ``*_for_record``
variants serve doctors working inside a record: they may only touch
prescriptions on records they authored, and cannot move a prescription
to another record.
"""
from __future__ import annotations

import logging

from portal import access
from portal.exceptions import NotFoundError
from portal.models import Prescription
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def list_prescriptions():
    return UnitOfWork().prescriptions.list_all().order_by('id')


def get_prescription(pk):
    return UnitOfWork().prescriptions.get_by_id(pk)


def prescriptions_for_record(principal: access.Principal, record_id):
    uow = UnitOfWork()
    record = found(uow.medical_records.get_by_id(record_id), 'MedicalRecord', record_id)
    access.resolve(principal, access.VIEW_RECORD, access.RecordRef.of(record)).require()
    return uow.prescriptions.for_record(record.pk)


def create_prescription(actor, data: dict) -> Prescription:
    with UnitOfWork() as uow:
        prescription = uow.prescriptions.add(Prescription(**data))
        log_action(user=actor, action='create', entity_name='Prescription', entity_id=prescription.pk)
    return prescription


def create_for_record(principal: access.Principal, actor, record_id, data: dict) -> Prescription:
    with UnitOfWork() as uow:
        record = uow.medical_records.get_by_id(record_id)
        if record is None:
            raise NotFoundError('MedicalRecord', record_id, message='Medical record not found.')
        access.resolve(principal, access.MANAGE_PRESCRIPTIONS, access.RecordRef.of(record)).require()
        prescription = uow.prescriptions.add(Prescription(medical_record=record, **data))
        log_action(user=actor, action='create', entity_name='Prescription', entity_id=prescription.pk,
                   details={'medical_record': record.pk})
    logger.info("Prescription %s added to record %s", prescription.pk, record.pk)
    return prescription


def update_prescription(actor, pk, data: dict) -> Prescription:
    with UnitOfWork() as uow:
        prescription = found(uow.prescriptions.get_by_id(pk), 'Prescription', pk)
        uow.prescriptions.update(apply_changes(prescription, data))
        log_action(user=actor, action='update', entity_name='Prescription', entity_id=pk)
    return prescription


def update_for_record(principal: access.Principal, actor, pk, data: dict) -> Prescription:
    with UnitOfWork() as uow:
        prescription = found(uow.prescriptions.get_by_id(pk), 'Prescription', pk)
        record = prescription.medical_record
        access.resolve(principal, access.MANAGE_PRESCRIPTIONS, access.RecordRef.of(record)).require()
        data = {k: v for k, v in data.items() if k not in ('medical_record', 'medical_record_id')}
        uow.prescriptions.update(apply_changes(prescription, data))
        log_action(user=actor, action='update', entity_name='Prescription', entity_id=pk,
                   details={'medical_record': record.pk})
    return prescription


def delete_prescription(actor, pk) -> None:
    with UnitOfWork() as uow:
        prescription = found(uow.prescriptions.get_by_id(pk), 'Prescription', pk)
        uow.prescriptions.delete(prescription)
        log_action(user=actor, action='delete', entity_name='Prescription', entity_id=pk)


def delete_for_record(principal: access.Principal, actor, pk) -> None:
    with UnitOfWork() as uow:
        prescription = found(uow.prescriptions.get_by_id(pk), 'Prescription', pk)
        record = prescription.medical_record
        access.resolve(principal, access.MANAGE_PRESCRIPTIONS, access.RecordRef.of(record)).require()
        uow.prescriptions.delete(prescription)
        log_action(user=actor, action='delete', entity_name='Prescription', entity_id=pk,
                   details={'medical_record': record.pk})
