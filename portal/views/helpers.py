"""Small request helpers shared by the API views."""
from __future__ import annotations

from datetime import datetime, time

from django.utils.dateparse import parse_date, parse_datetime
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from portal.access import Principal


def principal_of(request) -> Principal:
    """The caller as an access principal, resolved once per request."""
    cached = getattr(request, '_portal_principal', None)
    if cached is None:
        cached = Principal.from_user(request.user)
        request._portal_principal = cached
    return cached


def require(request, permission) -> None:
    """Apply a stricter permission class to one method of a shared endpoint."""
    checker = permission()
    if not checker.has_permission(request, None):
        raise PermissionDenied(checker.message)


def error(code: str, message, http_status: int) -> Response:
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=http_status)


def id_mismatch(request, pk):
    """400 response when the body names a different id than the path, else ``None``."""
    body_id = request.data.get('id') if hasattr(request.data, 'get') else None
    if body_id not in (None, '') and str(body_id) != str(pk):
        return error('id_mismatch', 'ID mismatch.', status.HTTP_400_BAD_REQUEST)
    return None


def _moment(raw: str | None, name: str):
    if not raw:
        return None
    value = parse_datetime(raw)
    if value is None:
        day = parse_date(raw)
        if day is None:
            raise ValidationError({name: ['Expected an ISO date or datetime.']})
        value = datetime.combine(day, time.min)
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def date_range(request):
    """``start``/``end`` query parameters as aware datetimes (either may be ``None``)."""
    params = request.query_params
    return _moment(params.get('start'), 'start'), _moment(params.get('end'), 'end')
