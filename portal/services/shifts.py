"""
Staff shifts and the urgent alert.

An urgent alert goes to exactly one nurse: among nurse shifts that
list today's weekday and whose window contains the current local time
(both bounds inclusive), the earliest-starting shift wins.  When no
nurse is on duty the alert is not escalated further; the caller gets
``None`` back.
"""
from __future__ import annotations

import logging
from datetime import datetime, time

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from portal.models import WEEKDAYS, Shift
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.services.notifications import push_to_user, send_email
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

ALERT_SUBJECT = "Emergency Alert"


def list_shifts(*, role: str | None = None, staff_id=None):
    uow = UnitOfWork()
    qs = uow.shifts.by_role(role) if role else uow.shifts.list_all()
    if staff_id is not None:
        qs = qs.filter(staff_id=staff_id)
    return qs


def shifts_for_staff(user_id):
    return UnitOfWork().shifts.by_staff(user_id)


def get_shift(pk):
    return UnitOfWork().shifts.get_by_id(pk)


def create_shift(actor, data: dict) -> Shift:
    data = dict(data)
    data['role'] = data['staff'].role
    with UnitOfWork() as uow:
        shift = uow.shifts.add(Shift(**data))
        log_action(user=actor, action='create', entity_name='Shift', entity_id=shift.pk)
    logger.info("Shift %s created for user %s", shift.pk, shift.staff_id)
    return shift


def update_shift(actor, pk, data: dict) -> Shift:
    with UnitOfWork() as uow:
        shift = found(uow.shifts.get_by_id(pk), 'Shift', pk)
        apply_changes(shift, data)
        shift.role = shift.staff.role
        uow.shifts.update(shift)
        log_action(user=actor, action='update', entity_name='Shift', entity_id=pk)
    return shift


def delete_shift(actor, pk) -> None:
    with UnitOfWork() as uow:
        shift = found(uow.shifts.get_by_id(pk), 'Shift', pk)
        uow.shifts.delete(shift)
        log_action(user=actor, action='delete', entity_name='Shift', entity_id=pk)


def current_slot(now: datetime | None = None) -> tuple[str, time]:
    """Weekday name and local time of day (whole seconds) for ``now``."""
    now = now or timezone.now()
    if timezone.is_naive(now):
        now = timezone.make_aware(now)
    local = timezone.localtime(now)
    return WEEKDAYS[local.weekday()], local.time().replace(microsecond=0)


def find_on_duty_nurse(now: datetime | None = None) -> Shift | None:
    day, at = current_slot(now)
    shifts = UnitOfWork().shifts.active_nurse_shifts(day, at)
    return shifts[0] if shifts else None


def alert_message(department, room, reported_by: str) -> str:
    return (
        "🚨 Urgent Emergency!\n\n"
        f"Department: {department.name}\n"
        f"Room: {room.room_number}\n"
        f"Reported by: {reported_by}"
    )


def send_urgent_alert(reporter, department_id, room_id, *, now: datetime | None = None) -> Shift | None:
    """Notify the on-duty nurse about an emergency in ``room_id``.

    Returns the shift of the nurse that was alerted, or ``None`` when
    nobody is on duty.
    """
    uow = UnitOfWork()
    department = found(uow.departments.get_by_id(department_id), 'Department', department_id)
    room = found(uow.rooms.get_by_id(room_id), 'Room', room_id)
    if room.department_id != department.pk:
        raise ValidationError({'room': ['Room does not belong to the selected department.']})

    shift = find_on_duty_nurse(now)
    if shift is None:
        logger.warning("Urgent alert for room %s: no nurse on duty", room.room_number)
        return None

    reported_by = getattr(reporter, 'email', '') or getattr(reporter, 'username', '')
    body = alert_message(department, room, reported_by)
    delivered = send_email(shift.staff.email, ALERT_SUBJECT, body)
    push_to_user(shift.staff_id, {
        'kind': 'urgent_alert',
        'department': department.name,
        'room': room.room_number,
        'reportedBy': reported_by,
        'message': body,
    })
    log_action(user=reporter, action='urgent_alert', entity_name='Room', entity_id=room.pk,
               details={'nurse': shift.staff_id, 'shift': shift.pk, 'delivered': delivered})
    logger.info("Urgent alert for room %s sent to nurse user %s", room.room_number, shift.staff_id)
    return shift
