"""
Self-service patient registration.

``POST /api/patient-requests`` is open to anonymous visitors (and rate
limited); reviewing requests is for administrators.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from portal.models import PatientRequest
from portal.permissions import IsAdminRole
from portal.serializers.patient import PatientRequestSerializer
from portal.services import patient_requests as svc
from portal.services.common import found
from portal.views.helpers import require


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def request_list(request):
    if request.method == 'POST':
        s = PatientRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        created = svc.submit_request(s.validated_data)
        return Response(PatientRequestSerializer(created).data, status=status.HTTP_201_CREATED)

    require(request, IsAdminRole)
    wanted = request.query_params.get('status') or None
    if wanted and wanted not in dict(PatientRequest.STATUS_CHOICES):
        return Response({'ok': False, 'error': {'code': 'invalid', 'message': f"Unknown status '{wanted}'."}},
                        status=status.HTTP_400_BAD_REQUEST)
    return Response(PatientRequestSerializer(svc.list_requests(wanted), many=True).data)

# anonymous submissions share the registration rate
request_list.cls.throttle_scope = 'registration'


@api_view(['GET', 'DELETE'])
@permission_classes([IsAdminRole])
def request_detail(request, pk: int):
    if request.method == 'DELETE':
        svc.delete_request(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
    return Response(PatientRequestSerializer(found(svc.get_request(pk), 'PatientRequest', pk)).data)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def request_approve(request, pk: int):
    approved = svc.approve_request(request.user, pk)
    return Response(PatientRequestSerializer(approved).data)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def request_reject(request, pk: int):
    rejected = svc.reject_request(request.user, pk)
    return Response(PatientRequestSerializer(rejected).data)
