"""
Self-service patient registration.

Anyone may submit a request; an administrator approves or rejects it.
A request moves from ``pending`` to exactly one of ``approved`` or
``rejected``:

* approving an approved request changes nothing;
* approving a rejected request, or rejecting an approved one, is a
  conflict.

Approval provisions the patient account and profile in one
transaction and mails the credentials to the requester's contact
address after commit.
"""
from __future__ import annotations

import logging
from functools import partial

from django.conf import settings
from django.utils import timezone

from portal.exceptions import ConflictError
from portal.models import PatientRequest, User
from portal.services.accounts import provision_account
from portal.services.audit import log_action
from portal.services.common import found
from portal.services.notifications import send_email
from portal.services.patients import add_profile
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

APPROVED_SUBJECT = "Your USAL Clinic Account Has Been Approved"
REJECTED_SUBJECT = "Your USAL Clinic Account Request Has Been Rejected"

PROFILE_FIELDS = ('date_of_birth', 'gender', 'address', 'major', 'blood_type')


def approval_message(request: PatientRequest, login: str) -> str:
    return (
        f"Dear {request.full_name},\n\n"
        "Your patient request has been approved. You can now log in using the "
        f"username: {login} and the default password: {settings.CLINIC_DEFAULT_PASSWORD}\n\n"
        "Please change your password after first login."
    )


def rejection_message(request: PatientRequest) -> str:
    return (
        f"Dear {request.full_name},\n\n"
        "We regret to inform you that your patient request has been rejected.\n\n"
        "For further inquiries, please contact support."
    )


def submit_request(data: dict) -> PatientRequest:
    with UnitOfWork() as uow:
        request = uow.patient_requests.add(PatientRequest(**data))
        log_action(user=None, action='submit', entity_name='PatientRequest', entity_id=request.pk)
    logger.info("New patient request %s from %s", request.pk, request.full_name)
    return request


def list_requests(status: str | None = None):
    uow = UnitOfWork()
    if status == PatientRequest.STATUS_PENDING:
        return uow.patient_requests.pending()
    qs = uow.patient_requests.list_all()
    return qs.filter(status=status) if status else qs


def get_request(pk):
    return UnitOfWork().patient_requests.get_by_id(pk)


def _locked(uow: UnitOfWork, pk) -> PatientRequest:
    return found(uow.patient_requests.filter(pk=pk).select_for_update().first(), 'PatientRequest', pk)


def _decide(request: PatientRequest, status: str, actor) -> None:
    request.status = status
    request.decided_at = timezone.now()
    request.decided_by = actor if getattr(actor, 'pk', None) else None


def approve_request(actor, pk) -> PatientRequest:
    with UnitOfWork() as uow:
        request = _locked(uow, pk)
        if request.status == PatientRequest.STATUS_APPROVED:
            logger.info("Patient request %s is already approved", pk)
            return request
        if request.status == PatientRequest.STATUS_REJECTED:
            raise ConflictError('Cannot approve a rejected request.')

        user = provision_account(request.full_name, User.ROLE_PATIENT)
        patient = add_profile(uow, user, {f: getattr(request, f) for f in PROFILE_FIELDS})
        _decide(request, PatientRequest.STATUS_APPROVED, actor)
        request.patient = patient
        uow.patient_requests.update(request)
        log_action(user=actor, action='approve', entity_name='PatientRequest', entity_id=pk,
                   details={'patient': patient.pk, 'login': user.username})
        uow.on_commit(partial(send_email, request.user_name, APPROVED_SUBJECT,
                              approval_message(request, user.username)))
    logger.info("Patient request %s approved and account %s created", pk, user.username)
    return request


def reject_request(actor, pk) -> PatientRequest:
    with UnitOfWork() as uow:
        request = _locked(uow, pk)
        if request.status == PatientRequest.STATUS_APPROVED:
            raise ConflictError('Cannot reject an approved request.')
        if request.status == PatientRequest.STATUS_REJECTED:
            return request
        _decide(request, PatientRequest.STATUS_REJECTED, actor)
        uow.patient_requests.update(request)
        log_action(user=actor, action='reject', entity_name='PatientRequest', entity_id=pk)
        uow.on_commit(partial(send_email, request.user_name, REJECTED_SUBJECT, rejection_message(request)))
    logger.info("Patient request %s rejected", pk)
    return request


def delete_request(actor, pk) -> None:
    with UnitOfWork() as uow:
        request = found(uow.patient_requests.get_by_id(pk), 'PatientRequest', pk)
        uow.patient_requests.delete(request)
        log_action(user=actor, action='delete', entity_name='PatientRequest', entity_id=pk)
