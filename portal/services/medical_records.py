"""
Medical records.

A doctor authors at most one record per patient.  Both creation paths
refuse a duplicate with a conflict, and so do updates that change the
doctor or the patient.  Reads go through :mod:`portal.access`.
"""
from __future__ import annotations

import logging

from rest_framework.exceptions import ValidationError

from portal import access
from portal.exceptions import AccessDenied, ConflictError, NotFoundError
from portal.models import MedicalRecord
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def list_records():
    return UnitOfWork().medical_records.list_all().order_by('-created_at', '-id')


def get_record(pk):
    return UnitOfWork().medical_records.get_by_id(pk)


def get_record_for(principal: access.Principal, pk) -> MedicalRecord:
    record = found(get_record(pk), 'MedicalRecord', pk)
    access.resolve(principal, access.VIEW_RECORD, access.RecordRef.of(record)).require()
    return record


def records_by_author(principal: access.Principal):
    """Records the calling doctor authored."""
    if principal.doctor_id is None:
        raise AccessDenied('No doctor profile is linked to this account.')
    return UnitOfWork().medical_records.for_doctor(principal.doctor_id)


def record_for_patient(principal: access.Principal, patient_id) -> MedicalRecord:
    """The single record ``principal`` gets to see for ``patient_id``.

    Doctors get the record they authored, everyone else allowed in gets
    the most recent one.  Raises ``AccessDenied`` or ``NotFoundError``.
    """
    uow = UnitOfWork()
    records = list(uow.medical_records.for_patient(patient_id))
    target = access.PatientRecords(patient_id=patient_id, records=[access.RecordRef.of(r) for r in records])
    decision = access.resolve(principal, access.VIEW_PATIENT_RECORDS, target)
    if not decision.allowed:
        logger.warning("Record access denied for user %s on patient %s: %s",
                       principal.user_id, patient_id, decision.reason)
        decision.require()
    if decision.selected is None:
        raise NotFoundError('MedicalRecord', patient_id,
                            message=f"No medical records found for patient with ID {patient_id}.")
    return next(r for r in records if r.pk == decision.selected)


def _ensure_single_record(uow: UnitOfWork, doctor_id, patient_id, *, exclude=None) -> None:
    """At most one record per (doctor, patient); ``exclude`` is the record being edited."""
    existing = uow.medical_records.by_doctor_and_patient(doctor_id, patient_id)
    if existing is not None and existing.pk != exclude:
        logger.warning("Duplicate record refused for doctor %s and patient %s", doctor_id, patient_id)
        raise ConflictError('Medical record already exists for this doctor and patient.')


def _ref_id(data: dict, field: str):
    if f'{field}_id' in data:
        return data[f'{field}_id']
    return getattr(data.get(field), 'pk', None)


def create_record(actor, data: dict) -> MedicalRecord:
    doctor_id = _ref_id(data, 'doctor')
    if doctor_id is None:
        raise ValidationError({'doctor': ['This field is required.']})
    with UnitOfWork() as uow:
        _ensure_single_record(uow, doctor_id, _ref_id(data, 'patient'))
        record = uow.medical_records.add(MedicalRecord(**data))
        log_action(user=actor, action='create', entity_name='MedicalRecord', entity_id=record.pk)
    logger.info("Medical record %s created", record.pk)
    return record


def create_record_as_doctor(principal: access.Principal, actor, data: dict) -> MedicalRecord:
    """Doctor-authoring path: the caller's own doctor profile is always the author."""
    decision = access.resolve(principal, access.CREATE_RECORD_AS_DOCTOR).require()
    data = dict(data)
    if decision.outcome == access.SCOPED:
        data.pop('doctor', None)
        data['doctor_id'] = decision.scope['doctor_id']
    doctor_id = _ref_id(data, 'doctor')
    if doctor_id is None:
        raise ValidationError({'doctor': ['This field is required.']})
    patient = data['patient']
    with UnitOfWork() as uow:
        _ensure_single_record(uow, doctor_id, patient.pk)
        record = uow.medical_records.add(MedicalRecord(**data))
        log_action(user=actor, action='create', entity_name='MedicalRecord', entity_id=record.pk,
                   details={'doctor': str(doctor_id), 'patient': patient.pk})
    logger.info("Medical record %s created by doctor %s", record.pk, doctor_id)
    return record


def update_record(principal: access.Principal, actor, pk, data: dict) -> MedicalRecord:
    with UnitOfWork() as uow:
        record = found(uow.medical_records.get_by_id(pk), 'MedicalRecord', pk)
        access.resolve(principal, access.UPDATE_RECORD, access.RecordRef.of(record)).require()
        data = dict(data)
        if principal.role == access.ROLE_DOCTOR:
            # authorship cannot be handed over
            data.pop('doctor', None)
            data.pop('doctor_id', None)
        doctor_id = _ref_id(data, 'doctor') or record.doctor_id
        patient_id = _ref_id(data, 'patient') or record.patient_id
        if (doctor_id, patient_id) != (record.doctor_id, record.patient_id):
            _ensure_single_record(uow, doctor_id, patient_id, exclude=record.pk)
        uow.medical_records.update(apply_changes(record, data))
        log_action(user=actor, action='update', entity_name='MedicalRecord', entity_id=pk)
    return record


def delete_record(actor, pk) -> None:
    with UnitOfWork() as uow:
        record = found(uow.medical_records.get_by_id(pk), 'MedicalRecord', pk)
        uow.medical_records.delete(record)
        log_action(user=actor, action='delete', entity_name='MedicalRecord', entity_id=pk)
    logger.info("Medical record %s deleted", pk)
