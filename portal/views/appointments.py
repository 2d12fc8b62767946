"""
Appointment endpoints.

Everyone signed in may read appointments; what they see is scoped by
role (doctors their own, patients their own, admins and nurses all).
Staff create and edit them.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsClinicUser, IsStaffRole
from portal.serializers.records import AppointmentSerializer
from portal.services import appointments as svc
from portal.services.common import found
from portal.views.helpers import date_range, id_mismatch, principal_of, require


@api_view(['GET', 'POST'])
@permission_classes([IsClinicUser])
def appointment_list(request):
    if request.method == 'GET':
        start, end = date_range(request)
        qs = svc.visible_appointments(principal_of(request), start=start, end=end)
        return Response(AppointmentSerializer(qs, many=True).data)

    require(request, IsStaffRole)
    s = AppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = svc.create_appointment(request.user, s.validated_data)
    return Response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsClinicUser])
def appointment_detail(request, pk: int):
    if request.method == 'GET':
        appointment = svc.get_appointment_for(principal_of(request), pk)
        return Response(AppointmentSerializer(appointment).data)

    require(request, IsStaffRole)
    if request.method == 'DELETE':
        svc.delete_appointment(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    instance = found(svc.get_appointment(pk), 'Appointment', pk)
    s = AppointmentSerializer(instance, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    appointment = svc.update_appointment(request.user, pk, s.validated_data)
    return Response(AppointmentSerializer(appointment).data)


@api_view(['GET'])
@permission_classes([IsClinicUser])
def appointments_by_doctor(request, doctor_id):
    qs = svc.appointments_for_doctor(principal_of(request), doctor_id)
    return Response(AppointmentSerializer(qs, many=True).data)


@api_view(['GET'])
@permission_classes([IsClinicUser])
def appointments_by_patient(request, patient_id: int):
    qs = svc.appointments_for_patient(principal_of(request), patient_id)
    return Response(AppointmentSerializer(qs, many=True).data)
