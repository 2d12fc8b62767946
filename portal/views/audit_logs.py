from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminRole
from portal.serializers.common import AuditLogSerializer
from portal.services.audit import list_logs


@api_view(['GET'])
@permission_classes([IsAdminRole])
def audit_log_list(request):
    """Audit trail, newest first; filter with ``entity``, ``entity_id`` and ``action``."""
    params = request.query_params
    qs = list_logs(entity_name=params.get('entity') or None, entity_id=params.get('entity_id') or None,
                   action=params.get('action') or None)
    try:
        limit = min(int(params.get('limit', 200)), 1000)
    except ValueError:
        return Response({'ok': False, 'error': {'code': 'invalid', 'message': 'limit must be an integer.'}},
                        status=400)
    return Response(AuditLogSerializer(qs[:limit], many=True).data)
