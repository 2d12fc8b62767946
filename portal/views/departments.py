"""
Department endpoints, including doctor assignment.

Any portal user may read departments; only administrators change them.
The list is served from cache (see ``portal.services.departments``).
"""
from __future__ import annotations

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminOrReadOnly, IsAdminRole
from portal.serializers.staff import AssignDoctorSerializer, DepartmentSerializer, DoctorAssignmentSerializer
from portal.services import departments as svc
from portal.services.common import found
from portal.views.helpers import id_mismatch


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def department_list(request):
    if request.method == 'GET':
        data = cache.get(svc.LIST_CACHE_KEY)
        if data is None:
            data = list(DepartmentSerializer(svc.list_departments(), many=True).data)
            cache.set(svc.LIST_CACHE_KEY, data, settings.CACHE_TTL)
        return Response(data)

    s = DepartmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    department = svc.create_department(request.user, s.validated_data)
    return Response(DepartmentSerializer(department).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def department_detail(request, pk: int):
    if request.method == 'DELETE':
        svc.delete_department(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    department = found(svc.get_department(pk), 'Department', pk)
    if request.method == 'GET':
        return Response(DepartmentSerializer(department).data)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    s = DepartmentSerializer(department, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    department = svc.update_department(request.user, pk, s.validated_data)
    return Response(DepartmentSerializer(department).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def department_doctors(request, pk: int):
    """Doctors assigned to a department; ``POST {"doctor_id": ...}`` assigns one."""
    if request.method == 'GET':
        return Response(DoctorAssignmentSerializer(svc.department_doctors(pk), many=True).data)

    s = AssignDoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    assignment = svc.assign_doctor(request.user, pk, s.validated_data['doctor_id'])
    return Response(DoctorAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAdminRole])
def department_doctor_remove(request, pk: int, doctor_id):
    svc.unassign_doctor(request.user, pk, doctor_id)
    return Response(status=status.HTTP_204_NO_CONTENT)
