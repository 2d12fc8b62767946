from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminRole, IsStaffRole
from portal.serializers.staff import NurseSerializer
from portal.services import nurses as svc
from portal.services.common import found
from portal.views.helpers import id_mismatch, require


@api_view(['GET', 'POST'])
@permission_classes([IsStaffRole])
def nurse_list(request):
    if request.method == 'GET':
        return Response(NurseSerializer(svc.list_nurses(), many=True).data)

    require(request, IsAdminRole)
    s = NurseSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    nurse = svc.create_nurse(request.user, s.validated_data)
    return Response(NurseSerializer(nurse).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffRole])
def nurse_detail(request, pk):
    if request.method != 'GET':
        require(request, IsAdminRole)
    if request.method == 'DELETE':
        svc.delete_nurse(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    nurse = found(svc.get_nurse(pk), 'Nurse', pk)
    if request.method == 'GET':
        return Response(NurseSerializer(nurse).data)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    s = NurseSerializer(nurse, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    nurse = svc.update_nurse(request.user, pk, s.validated_data)
    return Response(NurseSerializer(nurse).data)
