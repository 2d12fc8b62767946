from __future__ import annotations

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsAdminOrReadOnly
from portal.serializers.common import FAQEntrySerializer
from portal.services import faq as svc
from portal.services.common import found
from portal.views.helpers import id_mismatch


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def faq_list(request):
    if request.method == 'GET':
        data = cache.get(svc.LIST_CACHE_KEY)
        if data is None:
            data = list(FAQEntrySerializer(svc.list_entries(), many=True).data)
            cache.set(svc.LIST_CACHE_KEY, data, settings.CACHE_TTL)
        return Response(data)

    s = FAQEntrySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = svc.create_entry(request.user, s.validated_data)
    return Response(FAQEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def faq_detail(request, pk: int):
    if request.method == 'DELETE':
        svc.delete_entry(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    entry = found(svc.get_entry(pk), 'FAQEntry', pk)
    if request.method == 'GET':
        return Response(FAQEntrySerializer(entry).data)

    mismatch = id_mismatch(request, pk)
    if mismatch:
        return mismatch
    s = FAQEntrySerializer(entry, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    entry = svc.update_entry(request.user, pk, s.validated_data)
    return Response(FAQEntrySerializer(entry).data)
