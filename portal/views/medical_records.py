"""
Medical record endpoints.

Who sees which record is decided in ``portal.access``; these views
only translate requests.  Doctors always create records under their
own name, administrators name the doctor explicitly.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.models import User
from portal.permissions import IsAdminRole, IsClinicUser, IsDoctorOrAdmin
from portal.serializers.records import MedicalRecordSerializer, PrescriptionSerializer
from portal.services import medical_records as svc
from portal.services.common import found
from portal.services.prescriptions import prescriptions_for_record
from portal.views.helpers import id_mismatch, principal_of, require


@api_view(['GET', 'POST'])
@permission_classes([IsDoctorOrAdmin])
def record_list(request):
    if request.method == 'GET':
        require(request, IsAdminRole)
        return Response(MedicalRecordSerializer(svc.list_records(), many=True).data)

    s = MedicalRecordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    if request.user.role == User.ROLE_DOCTOR:
        record = svc.create_record_as_doctor(principal_of(request), request.user, s.validated_data)
    else:
        record = svc.create_record(request.user, s.validated_data)
    return Response(MedicalRecordSerializer(record).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsClinicUser])
def record_detail(request, pk: int):
    if request.method == 'GET':
        return Response(MedicalRecordSerializer(svc.get_record_for(principal_of(request), pk)).data)

    if request.method == 'DELETE':
        require(request, IsAdminRole)
        svc.delete_record(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    require(request, IsDoctorOrAdmin)
    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    record = found(svc.get_record(pk), 'MedicalRecord', pk)
    s = MedicalRecordSerializer(record, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    record = svc.update_record(principal_of(request), request.user, pk, s.validated_data)
    return Response(MedicalRecordSerializer(record).data)


@api_view(['GET'])
@permission_classes([IsClinicUser])
def records_for_patient(request, patient_id: int):
    """The record the caller may see for a patient: own for doctors, latest for everyone else."""
    record = svc.record_for_patient(principal_of(request), patient_id)
    return Response(MedicalRecordSerializer(record).data)


@api_view(['GET'])
@permission_classes([IsDoctorOrAdmin])
def records_by_me(request):
    return Response(MedicalRecordSerializer(svc.records_by_author(principal_of(request)), many=True).data)


@api_view(['GET'])
@permission_classes([IsClinicUser])
def record_prescriptions(request, pk: int):
    qs = prescriptions_for_record(principal_of(request), pk)
    return Response(PrescriptionSerializer(qs, many=True).data)
