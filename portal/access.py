"""
Role-scoped access decisions.

All record, patient and appointment visibility rules live here, in one
function: :func:`resolve` maps ``(principal, action, target)`` to a
:class:`Decision`.  The rules work on plain values (:class:`Principal`
and the small ``*Ref`` targets below), so they can be exercised without
a request or a database.  Services gather the facts, call ``resolve``
and act on the outcome; views never inspect roles themselves.

Outcomes:

``allow``
    full access; ``selected`` may name the entity picked for the caller.
``scoped``
    access restricted to ``scope`` (queryset filter arguments for the
    listing the action refers to).
``deny``
    refused; ``reason`` explains why and ``selected`` may carry a
    redirect target.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from .exceptions import AccessDenied

ALLOW = 'allow'
SCOPED = 'scoped'
DENY = 'deny'

ROLE_ADMIN = 'Admin'
ROLE_DOCTOR = 'Doctor'
ROLE_PATIENT = 'Patient'
ROLE_NURSE = 'Nurse'
ELEVATED_ROLES = frozenset({ROLE_ADMIN, ROLE_NURSE})

VIEW_PATIENT_RECORDS = 'records.view_for_patient'
VIEW_RECORD = 'records.view'
UPDATE_RECORD = 'records.update'
CREATE_RECORD_AS_DOCTOR = 'records.create_as_doctor'
MANAGE_PRESCRIPTIONS = 'prescriptions.manage'
LIST_PATIENTS = 'patients.list'
VIEW_PATIENT = 'patients.view'
LIST_APPOINTMENTS = 'appointments.list'
VIEW_APPOINTMENT = 'appointments.view'


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, with the profile matching their role."""
    user_id: Any
    role: str
    doctor_id: Any = None
    patient_id: Any = None
    nurse_id: Any = None

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

    @classmethod
    def from_user(cls, user) -> "Principal":
        from .models import Doctor, Nurse, Patient

        role = getattr(user, 'role', None) or ''
        kwargs: dict[str, Any] = {}
        if role == ROLE_DOCTOR:
            kwargs['doctor_id'] = Doctor.objects.filter(user_id=user.pk).values_list('id', flat=True).first()
        elif role == ROLE_PATIENT:
            kwargs['patient_id'] = Patient.objects.filter(user_id=user.pk).values_list('id', flat=True).first()
        elif role == ROLE_NURSE:
            kwargs['nurse_id'] = Nurse.objects.filter(user_id=user.pk).values_list('id', flat=True).first()
        return cls(user_id=user.pk, role=role, **kwargs)


@dataclass(frozen=True)
class RecordRef:
    id: Any
    doctor_id: Any
    patient_id: Any
    created_at: Optional[datetime] = None

    @classmethod
    def of(cls, record) -> "RecordRef":
        return cls(id=record.pk, doctor_id=record.doctor_id, patient_id=record.patient_id,
                   created_at=record.created_at)


@dataclass(frozen=True)
class PatientRecords:
    """Every record held for one patient."""
    patient_id: Any
    records: Sequence[RecordRef] = ()


@dataclass(frozen=True)
class AppointmentRef:
    doctor_user_id: Any
    patient_user_id: Any

    @classmethod
    def of(cls, appointment) -> "AppointmentRef":
        return cls(doctor_user_id=appointment.doctor.user_id, patient_user_id=appointment.patient.user_id)


@dataclass(frozen=True)
class Decision:
    outcome: str
    reason: str = ''
    scope: Mapping[str, Any] = field(default_factory=dict)
    selected: Any = None

    @property
    def allowed(self) -> bool:
        return self.outcome != DENY

    def require(self) -> "Decision":
        if not self.allowed:
            raise AccessDenied(self.reason or 'Access denied.', target=self.selected)
        return self


def allow(selected: Any = None, reason: str = '') -> Decision:
    return Decision(ALLOW, reason=reason, selected=selected)


def scoped(scope: Mapping[str, Any], selected: Any = None, reason: str = '') -> Decision:
    return Decision(SCOPED, reason=reason, scope=dict(scope), selected=selected)


def deny(reason: str, selected: Any = None) -> Decision:
    return Decision(DENY, reason=reason, selected=selected)


def _recency(record: RecordRef) -> tuple:
    stamp = record.created_at.timestamp() if record.created_at else float("-inf")
    return stamp, record.id


def _latest(records: Sequence[RecordRef]) -> Optional[RecordRef]:
    # newest first; the higher id wins a timestamp tie so the pick is stable
    ordered = sorted(records, key=_recency, reverse=True)
    return ordered[0] if ordered else None


def _view_patient_records(principal: Principal, target: PatientRecords) -> Decision:
    # ownership is checked before existence: a patient learns nothing about other patients
    if principal.role == ROLE_PATIENT:
        if principal.patient_id is None or principal.patient_id != target.patient_id:
            return deny('Patients may only view their own medical records.')
        latest = _latest(target.records)
        return allow(selected=latest.id if latest else None)

    if principal.role == ROLE_DOCTOR:
        if not target.records:
            return allow(selected=None, reason='no records')
        if principal.doctor_id is None:
            return deny('No doctor profile is linked to this account.')
        own = _latest([r for r in target.records if r.doctor_id == principal.doctor_id])
        if own is None:
            return deny('Doctors may only view records they authored.')
        return scoped({'doctor_id': principal.doctor_id}, selected=own.id)

    if principal.is_elevated:
        latest = _latest(target.records)
        return allow(selected=latest.id if latest else None)
    return deny('Role may not view medical records.')


def _view_record(principal: Principal, target: RecordRef) -> Decision:
    if principal.is_elevated:
        return allow(selected=target.id)
    if principal.role == ROLE_DOCTOR and principal.doctor_id is not None and target.doctor_id == principal.doctor_id:
        return allow(selected=target.id)
    if principal.role == ROLE_PATIENT and principal.patient_id is not None and target.patient_id == principal.patient_id:
        return allow(selected=target.id)
    return deny('Not permitted to view this medical record.')


def _author_record(principal: Principal, target: RecordRef) -> Decision:
    """Edit a record or its prescriptions: admins, or the authoring doctor."""
    if principal.role == ROLE_ADMIN:
        return allow(selected=target.id)
    if principal.role == ROLE_DOCTOR:
        if principal.doctor_id is None:
            return deny('No doctor profile is linked to this account.')
        if target.doctor_id == principal.doctor_id:
            return allow(selected=target.id)
        return deny('Doctors may only change records they authored.')
    return deny('Role may not change medical records.')


def _create_record_as_doctor(principal: Principal, target: Any = None) -> Decision:
    if principal.role == ROLE_DOCTOR:
        if principal.doctor_id is None:
            return deny('No doctor profile is linked to this account.')
        return scoped({'doctor_id': principal.doctor_id})
    if principal.role == ROLE_ADMIN:
        return allow()
    return deny('Only doctors and administrators may author medical records.')


def _list_patients(principal: Principal, target: Any = None) -> Decision:
    if principal.is_elevated:
        return allow()
    if principal.role == ROLE_DOCTOR:
        return scoped({'doctor_user_id': principal.user_id})
    if principal.role == ROLE_PATIENT:
        return deny('Patients may only view their own record.', selected=principal.patient_id)
    return deny('Role may not list patients.')


def _view_patient(principal: Principal, target: Any) -> Decision:
    if principal.is_elevated or principal.role == ROLE_DOCTOR:
        return allow(selected=target)
    if principal.role == ROLE_PATIENT and principal.patient_id is not None and principal.patient_id == target:
        return allow(selected=target)
    return deny('Not permitted to view this patient.')


def _list_appointments(principal: Principal, target: Any = None) -> Decision:
    if principal.is_elevated:
        return allow()
    if principal.role == ROLE_DOCTOR:
        return scoped({'doctor__user_id': principal.user_id})
    if principal.role == ROLE_PATIENT:
        return scoped({'patient__user_id': principal.user_id})
    return deny('Role may not list appointments.')


def _view_appointment(principal: Principal, target: AppointmentRef) -> Decision:
    if principal.is_elevated:
        return allow()
    if principal.role == ROLE_DOCTOR and target.doctor_user_id == principal.user_id:
        return allow()
    if principal.role == ROLE_PATIENT and target.patient_user_id == principal.user_id:
        return allow()
    return deny('Not permitted to view this appointment.')


RULES: dict[str, Callable[[Principal, Any], Decision]] = {
    VIEW_PATIENT_RECORDS: _view_patient_records,
    VIEW_RECORD: _view_record,
    UPDATE_RECORD: _author_record,
    MANAGE_PRESCRIPTIONS: _author_record,
    CREATE_RECORD_AS_DOCTOR: _create_record_as_doctor,
    LIST_PATIENTS: _list_patients,
    VIEW_PATIENT: _view_patient,
    LIST_APPOINTMENTS: _list_appointments,
    VIEW_APPOINTMENT: _view_appointment,
}


def resolve(principal: Principal, action: str, target: Any = None) -> Decision:
    """Decide whether ``principal`` may perform ``action`` on ``target``."""
    try:
        rule = RULES[action]
    except KeyError:
        raise ValueError(f"Unknown action: {action}") from None
    return rule(principal, target)
