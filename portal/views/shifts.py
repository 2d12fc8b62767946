"""
Shift management and the urgent alert.

Shifts are administered by admins.  Any signed-in user can raise an
urgent alert for a room; it is routed to the nurse whose shift is
running right now.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminRole, IsClinicUser
from portal.serializers.staff import ShiftSerializer, UrgentAlertSerializer
from portal.services import shifts as svc
from portal.services.common import found
from portal.views.helpers import error, id_mismatch


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def shift_list(request):
    if request.method == 'GET':
        qs = svc.list_shifts(role=request.query_params.get('role') or None,
                             staff_id=request.query_params.get('staff') or None)
        return Response(ShiftSerializer(qs, many=True).data)

    s = ShiftSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    shift = svc.create_shift(request.user, s.validated_data)
    return Response(ShiftSerializer(shift).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def shift_detail(request, pk: int):
    if request.method == 'DELETE':
        svc.delete_shift(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    shift = found(svc.get_shift(pk), 'Shift', pk)
    if request.method == 'GET':
        return Response(ShiftSerializer(shift).data)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    s = ShiftSerializer(shift, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    shift = svc.update_shift(request.user, pk, s.validated_data)
    return Response(ShiftSerializer(shift).data)


@api_view(['GET'])
@permission_classes([IsClinicUser])
def my_shifts(request):
    return Response(ShiftSerializer(svc.shifts_for_staff(request.user.pk), many=True).data)


@api_view(['POST'])
@permission_classes([IsClinicUser])
def urgent_alert(request):
    s = UrgentAlertSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    shift = svc.send_urgent_alert(request.user, s.validated_data['department_id'], s.validated_data['room_id'])
    if shift is None:
        return error('no_nurse_on_duty', 'No available nurse found at this moment.', status.HTTP_400_BAD_REQUEST)
    return Response({
        'ok': True,
        'message': 'Alert sent to on-duty nurse.',
        'nurse': shift.staff.display_name,
        'shift': shift.pk,
    })
