"""
Departments and doctor assignments.

The department list is read on almost every screen; it is cached for
``CACHE_TTL`` seconds and dropped on any department write.
"""
from __future__ import annotations

import logging

from django.core.cache import cache
from django.db import IntegrityError

from portal.exceptions import ConflictError, NotFoundError
from portal.models import Department, DoctorDepartment
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

LIST_CACHE_KEY = 'departments:list'


def invalidate_cache() -> None:
    cache.delete(LIST_CACHE_KEY)


def list_departments():
    return UnitOfWork().departments.list_all()


def get_department(pk):
    return UnitOfWork().departments.get_by_id(pk)


def create_department(actor, data: dict) -> Department:
    with UnitOfWork() as uow:
        department = uow.departments.add(Department(**data))
        log_action(user=actor, action='create', entity_name='Department', entity_id=department.pk)
    invalidate_cache()
    logger.info("Department %s created", department.pk)
    return department


def update_department(actor, pk, data: dict) -> Department:
    with UnitOfWork() as uow:
        department = found(uow.departments.get_by_id(pk), 'Department', pk)
        uow.departments.update(apply_changes(department, data))
        log_action(user=actor, action='update', entity_name='Department', entity_id=pk)
    invalidate_cache()
    return department


def delete_department(actor, pk) -> None:
    with UnitOfWork() as uow:
        department = found(uow.departments.get_by_id(pk), 'Department', pk)
        uow.departments.delete(department)
        log_action(user=actor, action='delete', entity_name='Department', entity_id=pk)
    invalidate_cache()
    logger.info("Department %s deleted", pk)


def department_doctors(department_id):
    uow = UnitOfWork()
    found(uow.departments.get_by_id(department_id), 'Department', department_id)
    return uow.doctor_departments.for_department(department_id)


def assign_doctor(actor, department_id, doctor_id) -> DoctorDepartment:
    with UnitOfWork() as uow:
        department = found(uow.departments.get_by_id(department_id), 'Department', department_id)
        doctor = found(uow.doctors.get_by_id(doctor_id), 'Doctor', doctor_id)
        if uow.doctor_departments.get_pair(doctor.pk, department.pk) is not None:
            raise ConflictError('Doctor is already assigned to this department.')
        try:
            assignment = uow.doctor_departments.add(DoctorDepartment(doctor=doctor, department=department))
        except IntegrityError:
            raise ConflictError('Doctor is already assigned to this department.')
        log_action(user=actor, action='assign_doctor', entity_name='Department', entity_id=department.pk,
                   details={'doctor': str(doctor.pk)})
    return assignment


def unassign_doctor(actor, department_id, doctor_id) -> None:
    with UnitOfWork() as uow:
        assignment = uow.doctor_departments.get_pair(doctor_id, department_id)
        if assignment is None:
            raise NotFoundError('Assignment', doctor_id, message='Doctor is not assigned to this department.')
        uow.doctor_departments.delete(assignment)
        log_action(user=actor, action='unassign_doctor', entity_name='Department', entity_id=department_id,
                   details={'doctor': str(doctor_id)})
