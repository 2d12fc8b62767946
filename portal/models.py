"""
Database models for the clinic portal.

A login identity (:class:`User`) owns at most one role profile
(:class:`Doctor`, :class:`Patient` or :class:`Nurse`).  Clinical data
hangs off the profiles: appointments and medical records link a doctor
to a patient, prescriptions belong to a medical record.  Departments
own rooms and doctor assignments; shifts describe when staff are on
duty.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']


class User(AbstractUser):
    """Login identity with a single role claim.

    New accounts are created with ``must_change_password`` set; the
    API refuses everything except the password change endpoint until
    the flag is cleared.
    """
    ROLE_ADMIN = 'Admin'
    ROLE_DOCTOR = 'Doctor'
    ROLE_PATIENT = 'Patient'
    ROLE_NURSE = 'Nurse'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_PATIENT, 'Patient'),
        (ROLE_NURSE, 'Nurse'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    full_name = models.CharField(max_length=255, blank=True)
    must_change_password = models.BooleanField(default=True)
    email_confirmed = models.BooleanField(default=False)

    @property
    def display_name(self) -> str:
        return self.full_name or self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Department(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Doctor(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    profession = models.CharField(max_length=255)
    years_of_experience = models.PositiveIntegerField(default=0)
    address = models.CharField(max_length=255, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    departments = models.ManyToManyField(Department, through='DoctorDepartment', related_name='doctors')

    @property
    def full_name(self) -> str:
        return self.user.display_name

    def __str__(self) -> str:
        return f"Dr. {self.user.display_name} ({self.profession})"


class DoctorDepartment(models.Model):
    """Assignment of a doctor to a department."""
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='department_assignments')
    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name='doctor_assignments')
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('doctor', 'department')]

    def __str__(self) -> str:
        return f"{self.doctor} in {self.department}"


class Patient(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient_profile')
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=255, blank=True)
    # ward or study major, free text
    major = models.CharField(max_length=100, blank=True)
    blood_type = models.CharField(max_length=5, blank=True)

    @property
    def full_name(self) -> str:
        return self.user.display_name

    def __str__(self) -> str:
        return self.user.display_name


class Nurse(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='nurse_profile')
    gender = models.CharField(max_length=20, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    address = models.CharField(max_length=255, blank=True)
    phone_number = models.CharField(max_length=32, blank=True)
    years_of_experience = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def full_name(self) -> str:
        return self.user.display_name

    def __str__(self) -> str:
        return self.user.display_name


class Appointment(models.Model):
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='appointments')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    appointment_date = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=100, default='Scheduled')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['appointment_date', 'id']

    def __str__(self) -> str:
        return f"{self.patient} with {self.doctor} at {self.appointment_date:%Y-%m-%d %H:%M}"


class MedicalRecord(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medical_records')
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='medical_records')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='medical_records'
    )
    diagnosis = models.TextField()
    # free-text summary; structured items live in Prescription
    prescription = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['doctor', 'patient'], name='portal_medi_doctor__7c1f2e_idx')]

    def __str__(self) -> str:
        return f"Record {self.pk} for {self.patient}"


class Prescription(models.Model):
    medical_record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name='prescriptions')
    medication_name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=100)
    frequency = models.CharField(max_length=100, blank=True)
    duration = models.CharField(max_length=100, blank=True)
    instructions = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.medication_name} {self.dosage}"


class Room(models.Model):
    room_number = models.CharField(max_length=10)
    room_type = models.CharField(max_length=50, blank=True)
    is_available = models.BooleanField(default=True)
    description = models.TextField(blank=True)
    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name='rooms')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Room {self.room_number}"


class Shift(models.Model):
    """Weekly duty window for a staff member.

    ``days_of_week`` holds weekday names from :data:`WEEKDAYS`.  The
    window is ``start_time``..``end_time`` on each listed day, bounds
    inclusive; windows crossing midnight are not supported.
    """
    staff = models.ForeignKey(User, on_delete=models.CASCADE, related_name='shifts')
    days_of_week = models.JSONField(default=list)
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_repeating_weekly = models.BooleanField(default=True)
    role = models.CharField(max_length=10, choices=User.ROLE_CHOICES, db_index=True)

    class Meta:
        ordering = ['start_time', 'id']

    def covers(self, day: str, at) -> bool:
        return day in (self.days_of_week or []) and self.start_time <= at <= self.end_time

    def __str__(self) -> str:
        return f"{self.staff} {','.join(self.days_of_week or [])} {self.start_time}-{self.end_time}"


class PatientRequest(models.Model):
    """Self-service registration waiting for an administrator."""
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    full_name = models.CharField(max_length=255)
    # contact address of the requester
    user_name = models.EmailField()
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=255, blank=True)
    major = models.CharField(max_length=100, blank=True)
    blood_type = models.CharField(max_length=5, blank=True)
    requested_at = models.DateTimeField(auto_now_add=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    decided_at = models.DateTimeField(null=True, blank=True)
    decided_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='decided_patient_requests'
    )
    patient = models.OneToOneField(
        Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='registration_request'
    )

    class Meta:
        ordering = ['-requested_at', '-id']

    def __str__(self) -> str:
        return f"{self.full_name} ({self.status})"


class AuditLog(models.Model):
    """Append-only record of write operations."""
    action = models.CharField(max_length=50, db_index=True)
    entity_name = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64, blank=True)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    performed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='audit_logs'
    )

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [models.Index(fields=['entity_name', 'entity_id'], name='portal_audi_entity__3b9d41_idx')]

    def save(self, *args, **kwargs):
        if self.pk is not None and AuditLog.objects.filter(pk=self.pk).exists():
            raise ValueError("Audit log entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Audit log entries cannot be deleted.")

    def __str__(self) -> str:
        return f"{self.action} {self.entity_name}:{self.entity_id}"


class FAQEntry(models.Model):
    question = models.CharField(max_length=500)
    answer = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'FAQ entry'
        verbose_name_plural = 'FAQ entries'
        ordering = ['id']

    def __str__(self) -> str:
        return self.question
