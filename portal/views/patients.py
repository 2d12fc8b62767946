"""
Patient endpoints.

``GET /api/patients`` depends on who asks: administrators and nurses
get every patient, doctors get the patients they have a record or an
appointment with, and patients are redirected to their own medical
record.
"""
from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.exceptions import AccessDenied
from portal.permissions import IsAdminRole, IsClinicUser
from portal.serializers.patient import PatientSerializer
from portal.services import patients as svc
from portal.services.common import found
from portal.views.helpers import id_mismatch, principal_of, require


@api_view(['GET', 'POST'])
@permission_classes([IsClinicUser])
def patient_list(request):
    if request.method == 'GET':
        try:
            qs = svc.visible_patients(principal_of(request))
        except AccessDenied as e:
            if e.target is None:
                raise
            url = reverse('records-for-patient', kwargs={'patient_id': e.target})
            return Response({'ok': False, 'redirect': url}, status=status.HTTP_303_SEE_OTHER,
                            headers={'Location': url})
        return Response(PatientSerializer(qs, many=True).data)

    require(request, IsAdminRole)
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = svc.create_patient(request.user, s.validated_data)
    return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsClinicUser])
def patient_detail(request, pk: int):
    if request.method == 'GET':
        return Response(PatientSerializer(svc.get_patient_for(principal_of(request), pk)).data)

    require(request, IsAdminRole)
    if request.method == 'DELETE':
        svc.delete_patient(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    patient = found(svc.get_patient(pk), 'Patient', pk)
    s = PatientSerializer(patient, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    patient = svc.update_patient(request.user, pk, s.validated_data)
    return Response(PatientSerializer(patient).data)
