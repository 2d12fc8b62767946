from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminOrReadOnly, IsClinicUser
from portal.serializers.staff import RoomSerializer
from portal.services import rooms as svc
from portal.services.common import found
from portal.views.helpers import id_mismatch


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def room_list(request):
    if request.method == 'GET':
        return Response(RoomSerializer(svc.list_rooms(), many=True).data)

    s = RoomSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    room = svc.create_room(request.user, s.validated_data)
    return Response(RoomSerializer(room).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def room_detail(request, pk: int):
    if request.method == 'DELETE':
        svc.delete_room(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    room = found(svc.get_room(pk), 'Room', pk)
    if request.method == 'GET':
        return Response(RoomSerializer(room).data)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    s = RoomSerializer(room, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    room = svc.update_room(request.user, pk, s.validated_data)
    return Response(RoomSerializer(room).data)


@api_view(['GET'])
@permission_classes([IsClinicUser])
def rooms_by_department(request, department_id: int):
    return Response(RoomSerializer(svc.rooms_in_department(department_id), many=True).data)


@api_view(['GET'])
@permission_classes([IsClinicUser])
def room_availability(request, pk: int):
    return Response({'id': pk, 'is_available': svc.is_available(pk)})
