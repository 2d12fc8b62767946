"""
Transactional boundary over the repositories.

Usage::

    with UnitOfWork() as uow:
        record = uow.medical_records.add(MedicalRecord(...))
        uow.on_commit(lambda: notify(record))

The block runs inside ``transaction.atomic``: an exception rolls back
every write made through the repositories, and callbacks registered
with :meth:`UnitOfWork.on_commit` only run once the outermost
transaction has committed.
"""
from __future__ import annotations

import logging
from typing import Callable

from django.db import transaction

from . import repositories as repos

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, using: str | None = None):
        self.using = using
        self._atomic = None
        self.users = repos.UserRepository()
        self.departments = repos.DepartmentRepository()
        self.doctors = repos.DoctorRepository()
        self.doctor_departments = repos.DoctorDepartmentRepository()
        self.patients = repos.PatientRepository()
        self.nurses = repos.NurseRepository()
        self.appointments = repos.AppointmentRepository()
        self.medical_records = repos.MedicalRecordRepository()
        self.prescriptions = repos.PrescriptionRepository()
        self.rooms = repos.RoomRepository()
        self.shifts = repos.ShiftRepository()
        self.patient_requests = repos.PatientRequestRepository()
        self.audit_logs = repos.AuditLogRepository()
        self.faq_entries = repos.FAQEntryRepository()

    def __enter__(self) -> "UnitOfWork":
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb):
        atomic, self._atomic = self._atomic, None
        if exc_type is not None:
            logger.warning("Rolling back unit of work: %s", exc)
        return atomic.__exit__(exc_type, exc, tb)

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback, using=self.using)
