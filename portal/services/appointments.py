"""
Appointments between a doctor and a patient.

Creating an appointment emails the patient a confirmation once the
row has been committed; a delivery failure is logged and does not
affect the stored appointment.
"""
from __future__ import annotations

import logging
from datetime import datetime
from functools import partial

from django.utils import timezone

from portal import access
from portal.models import Appointment
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.services.notifications import send_email
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Appointment Confirmation - USAL Clinic"


def confirmation_message(appointment: Appointment) -> str:
    when = timezone.localtime(appointment.appointment_date).strftime('%Y-%m-%d %H:%M')
    return (
        f"Hello {appointment.patient.user.display_name},\n\n"
        f"Your appointment has been scheduled with Dr. {appointment.doctor.user.display_name}.\n"
        f"📅 Date & Time: {when}\n"
        f"📝 Status: {appointment.status}\n"
        f"📌 Notes: {appointment.notes}\n\n"
        "Thank you,\nUSAL Clinic"
    )


def visible_appointments(principal: access.Principal, *, start: datetime | None = None,
                         end: datetime | None = None):
    decision = access.resolve(principal, access.LIST_APPOINTMENTS).require()
    uow = UnitOfWork()
    qs = uow.appointments.filter(**decision.scope) if decision.outcome == access.SCOPED else uow.appointments.list_all()
    return uow.appointments.in_range(start, end, qs)


def appointments_for_doctor(principal: access.Principal, doctor_id):
    return visible_appointments(principal).filter(doctor_id=doctor_id)


def appointments_for_patient(principal: access.Principal, patient_id):
    return visible_appointments(principal).filter(patient_id=patient_id)


def get_appointment(pk):
    return UnitOfWork().appointments.get_by_id(pk)


def get_appointment_for(principal: access.Principal, pk) -> Appointment:
    appointment = found(get_appointment(pk), 'Appointment', pk)
    access.resolve(principal, access.VIEW_APPOINTMENT, access.AppointmentRef.of(appointment)).require()
    return appointment


def create_appointment(actor, data: dict) -> Appointment:
    with UnitOfWork() as uow:
        appointment = uow.appointments.add(Appointment(**data))
        log_action(user=actor, action='create', entity_name='Appointment', entity_id=appointment.pk)
        recipient = appointment.patient.user.email
        uow.on_commit(partial(send_email, recipient, CONFIRMATION_SUBJECT, confirmation_message(appointment)))
    logger.info("Appointment %s created", appointment.pk)
    return appointment


def update_appointment(actor, pk, data: dict) -> Appointment:
    with UnitOfWork() as uow:
        appointment = found(uow.appointments.get_by_id(pk), 'Appointment', pk)
        uow.appointments.update(apply_changes(appointment, data))
        log_action(user=actor, action='update', entity_name='Appointment', entity_id=pk)
    return appointment


def delete_appointment(actor, pk) -> None:
    with UnitOfWork() as uow:
        appointment = found(uow.appointments.get_by_id(pk), 'Appointment', pk)
        uow.appointments.delete(appointment)
        log_action(user=actor, action='delete', entity_name='Appointment', entity_id=pk)


def calendar_events(principal: access.Principal, *, start: datetime | None = None, end: datetime | None = None):
    return [
        {
            'id': a.pk,
            'title': f"{a.patient.user.display_name} / Dr. {a.doctor.user.display_name}",
            'start': a.appointment_date.isoformat(),
            'status': a.status,
            'doctorId': str(a.doctor_id),
            'patientId': a.patient_id,
        }
        for a in visible_appointments(principal, start=start, end=end)
    ]
