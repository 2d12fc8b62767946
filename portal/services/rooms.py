from __future__ import annotations

import logging

from portal.models import Room
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def list_rooms():
    return UnitOfWork().rooms.list_all().order_by('department_id', 'room_number')


def get_room(pk):
    return UnitOfWork().rooms.get_by_id(pk)


def rooms_in_department(department_id):
    uow = UnitOfWork()
    found(uow.departments.get_by_id(department_id), 'Department', department_id)
    return uow.rooms.by_department(department_id)


def is_available(pk) -> bool:
    room = found(get_room(pk), 'Room', pk)
    return room.is_available


def create_room(actor, data: dict) -> Room:
    with UnitOfWork() as uow:
        room = uow.rooms.add(Room(**data))
        log_action(user=actor, action='create', entity_name='Room', entity_id=room.pk)
    logger.info("Room %s created in department %s", room.room_number, room.department_id)
    return room


def update_room(actor, pk, data: dict) -> Room:
    with UnitOfWork() as uow:
        room = found(uow.rooms.get_by_id(pk), 'Room', pk)
        uow.rooms.update(apply_changes(room, data))
        log_action(user=actor, action='update', entity_name='Room', entity_id=pk)
    return room


def delete_room(actor, pk) -> None:
    with UnitOfWork() as uow:
        room = found(uow.rooms.get_by_id(pk), 'Room', pk)
        uow.rooms.delete(room)
        log_action(user=actor, action='delete', entity_name='Room', entity_id=pk)
