"""
Administrative dashboard and the role-scoped calendar.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminRole, IsClinicUser
from portal.serializers.staff import DepartmentSerializer
from portal.services.appointments import calendar_events
from portal.services.departments import list_departments
from portal.unit_of_work import UnitOfWork
from portal.views.helpers import date_range, principal_of


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_dashboard(request):
    """Headline counts, the department list and the calendar for the requested window."""
    uow = UnitOfWork()
    start, end = date_range(request)
    return Response({
        'counts': {
            'appointments': uow.appointments.count(),
            'patients': uow.patients.count(),
            'doctors': uow.doctors.count(),
            'nurses': uow.nurses.count(),
            'pendingRequests': uow.patient_requests.pending().count(),
        },
        'departments': DepartmentSerializer(list_departments(), many=True).data,
        'events': calendar_events(principal_of(request), start=start, end=end),
    })


@api_view(['GET'])
@permission_classes([IsClinicUser])
def calendar(request):
    start, end = date_range(request)
    return Response(calendar_events(principal_of(request), start=start, end=end))
