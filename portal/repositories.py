"""
Per-entity data access.

Each repository wraps one model manager and adds the filtered lookups
the services need.  Lookups by id return ``None`` on a miss; deciding
whether a miss is an error is left to the service.
"""
from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Any, Generic, Optional, TypeVar

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, QuerySet

from .models import (
    Appointment,
    AuditLog,
    Department,
    Doctor,
    DoctorDepartment,
    FAQEntry,
    MedicalRecord,
    Nurse,
    Patient,
    PatientRequest,
    Prescription,
    Room,
    Shift,
    User,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=models.Model)


class Repository(Generic[ModelT]):
    model: type[ModelT]
    related: tuple[str, ...] = ()
    prefetch: tuple[str, ...] = ()

    def query(self) -> QuerySet:
        qs = self.model._default_manager.all()
        if self.related:
            qs = qs.select_related(*self.related)
        if self.prefetch:
            qs = qs.prefetch_related(*self.prefetch)
        return qs

    def get_by_id(self, pk: Any) -> Optional[ModelT]:
        try:
            return self.query().filter(pk=pk).first()
        except (ValueError, TypeError, ValidationError):
            # malformed key (e.g. not a UUID) cannot match a row
            return None

    def list_all(self) -> QuerySet:
        return self.query()

    def filter(self, *args, **scope) -> QuerySet:
        return self.query().filter(*args, **scope)

    def add(self, obj: ModelT) -> ModelT:
        obj.save(force_insert=True)
        logger.debug("Added %s %s", self.model.__name__, obj.pk)
        return obj

    def update(self, obj: ModelT) -> ModelT:
        obj.save()
        return obj

    def delete(self, obj: ModelT) -> None:
        obj.delete()

    def count(self) -> int:
        return self.model._default_manager.count()


class UserRepository(Repository[User]):
    model = User


class DepartmentRepository(Repository[Department]):
    model = Department


class DoctorRepository(Repository[Doctor]):
    model = Doctor
    related = ('user',)
    prefetch = ('departments',)


class DoctorDepartmentRepository(Repository[DoctorDepartment]):
    model = DoctorDepartment
    related = ('doctor__user', 'department')

    def for_department(self, department_id: Any) -> QuerySet:
        return self.query().filter(department_id=department_id).order_by('assigned_at', 'id')

    def get_pair(self, doctor_id: Any, department_id: Any) -> Optional[DoctorDepartment]:
        return self.query().filter(doctor_id=doctor_id, department_id=department_id).first()


class PatientRepository(Repository[Patient]):
    model = Patient
    related = ('user',)

    def by_user_id(self, user_id: Any) -> Optional[Patient]:
        return self.query().filter(user_id=user_id).first()

    def visible_to_doctor_user(self, user_id: Any) -> QuerySet:
        """Patients with a record or an appointment whose doctor belongs to ``user_id``."""
        return self.query().filter(
            Q(medical_records__doctor__user_id=user_id) | Q(appointments__doctor__user_id=user_id)
        ).distinct().order_by('id')


class NurseRepository(Repository[Nurse]):
    model = Nurse
    related = ('user',)


class AppointmentRepository(Repository[Appointment]):
    model = Appointment
    related = ('doctor__user', 'patient__user')

    def in_range(self, start: datetime | None, end: datetime | None, qs: QuerySet | None = None) -> QuerySet:
        qs = self.query() if qs is None else qs
        if start is not None:
            qs = qs.filter(appointment_date__gte=start)
        if end is not None:
            qs = qs.filter(appointment_date__lt=end)
        return qs


class MedicalRecordRepository(Repository[MedicalRecord]):
    model = MedicalRecord
    related = ('doctor__user', 'patient__user', 'appointment')
    prefetch = ('prescriptions',)

    def for_patient(self, patient_id: Any) -> QuerySet:
        # newest first; id breaks ties between equal timestamps
        return self.query().filter(patient_id=patient_id).order_by('-created_at', '-id')

    def for_doctor(self, doctor_id: Any) -> QuerySet:
        return self.query().filter(doctor_id=doctor_id).order_by('-created_at', '-id')

    def by_doctor_and_patient(self, doctor_id: Any, patient_id: Any) -> Optional[MedicalRecord]:
        return self.query().filter(doctor_id=doctor_id, patient_id=patient_id).order_by('created_at', 'id').first()


class PrescriptionRepository(Repository[Prescription]):
    model = Prescription
    related = ('medical_record',)

    def for_record(self, record_id: Any) -> QuerySet:
        return self.query().filter(medical_record_id=record_id).order_by('created_at', 'id')


class RoomRepository(Repository[Room]):
    model = Room
    related = ('department',)

    def by_department(self, department_id: Any) -> QuerySet:
        return self.query().filter(department_id=department_id).order_by('room_number')


class ShiftRepository(Repository[Shift]):
    model = Shift
    related = ('staff',)

    def by_staff(self, user_id: Any) -> QuerySet:
        return self.query().filter(staff_id=user_id)

    def by_role(self, role: str) -> QuerySet:
        return self.query().filter(role=role)

    def active_nurse_shifts(self, day: str, at: time) -> list[Shift]:
        """Nurse shifts covering ``day`` at ``at``, earliest start first.

        The time window is filtered in SQL; the weekday list is a JSON
        array, matched in Python so every backend behaves the same.
        """
        qs = self.query().filter(
            role=User.ROLE_NURSE, start_time__lte=at, end_time__gte=at,
        ).order_by('start_time', 'id')
        return [s for s in qs if s.covers(day, at)]


class PatientRequestRepository(Repository[PatientRequest]):
    model = PatientRequest

    def pending(self) -> QuerySet:
        return self.query().filter(status=PatientRequest.STATUS_PENDING)


class AuditLogRepository(Repository[AuditLog]):
    model = AuditLog
    related = ('performed_by',)

    def for_entity(self, entity_name: str, entity_id: Any) -> QuerySet:
        return self.query().filter(entity_name=entity_name, entity_id=str(entity_id))

    def delete(self, obj: AuditLog) -> None:
        raise ValueError("Audit log entries cannot be deleted.")


class FAQEntryRepository(Repository[FAQEntry]):
    model = FAQEntry

