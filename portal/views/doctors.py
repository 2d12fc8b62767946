"""
Doctor endpoints.

Creating a doctor also provisions their login (see
``portal.services.accounts``); deleting one removes the login too.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminOrReadOnly
from portal.serializers.staff import DoctorSerializer
from portal.services import doctors as svc
from portal.services.common import found
from portal.views.helpers import id_mismatch


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def doctor_list(request):
    if request.method == 'GET':
        return Response(DoctorSerializer(svc.list_doctors(), many=True).data)

    s = DoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = svc.create_doctor(request.user, s.validated_data)
    return Response(DoctorSerializer(doctor).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def doctor_detail(request, pk):
    if request.method == 'DELETE':
        svc.delete_doctor(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    doctor = found(svc.get_doctor(pk), 'Doctor', pk)
    if request.method == 'GET':
        return Response(DoctorSerializer(doctor).data)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    s = DoctorSerializer(doctor, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    doctor = svc.update_doctor(request.user, pk, s.validated_data)
    return Response(DoctorSerializer(doctor).data)
