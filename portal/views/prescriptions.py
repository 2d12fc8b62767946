"""
Prescription endpoints.

Plain CRUD is for administrators.  Doctors work through the
``for-record`` / ``edit-medical`` / ``delete-medical`` routes, which
only accept records the doctor authored.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminRole, IsDoctorOrAdmin
from portal.serializers.records import PrescriptionForRecordSerializer, PrescriptionSerializer
from portal.services import prescriptions as svc
from portal.services.common import found
from portal.views.helpers import id_mismatch, principal_of


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def prescription_list(request):
    if request.method == 'GET':
        return Response(PrescriptionSerializer(svc.list_prescriptions(), many=True).data)

    s = PrescriptionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    prescription = svc.create_prescription(request.user, s.validated_data)
    return Response(PrescriptionSerializer(prescription).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def prescription_detail(request, pk: int):
    if request.method == 'DELETE':
        svc.delete_prescription(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    prescription = found(svc.get_prescription(pk), 'Prescription', pk)
    if request.method == 'GET':
        return Response(PrescriptionSerializer(prescription).data)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    s = PrescriptionSerializer(prescription, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    prescription = svc.update_prescription(request.user, pk, s.validated_data)
    return Response(PrescriptionSerializer(prescription).data)


@api_view(['POST'])
@permission_classes([IsDoctorOrAdmin])
def prescription_for_record(request):
    s = PrescriptionForRecordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    record_id = data.pop('medical_record_id')
    prescription = svc.create_for_record(principal_of(request), request.user, record_id, data)
    return Response(PrescriptionSerializer(prescription).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsDoctorOrAdmin])
def prescription_edit_medical(request, pk: int):
    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    prescription = found(svc.get_prescription(pk), 'Prescription', pk)
    s = PrescriptionSerializer(prescription, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    prescription = svc.update_for_record(principal_of(request), request.user, pk, s.validated_data)
    return Response(PrescriptionSerializer(prescription).data)


@api_view(['DELETE'])
@permission_classes([IsDoctorOrAdmin])
def prescription_delete_medical(request, pk: int):
    svc.delete_for_record(principal_of(request), request.user, pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
