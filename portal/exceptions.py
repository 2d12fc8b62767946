"""
Domain errors and the unified API error envelope.

Services raise the :class:`DomainError` subclasses below; the DRF
exception handler turns them (and DRF's own errors) into
``{'ok': False, 'error': {'code': ..., 'message': ...}}`` responses.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    code = 'domain_error'
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    code = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id=None, message: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} with ID {entity_id} does not exist.")


class ConflictError(DomainError):
    code = 'conflict'
    status_code = status.HTTP_409_CONFLICT


class AccessDenied(DomainError):
    """Caller may not act on the target; ``target`` may name where they should go instead."""
    code = 'forbidden'
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = '', target=None):
        super().__init__(message)
        self.target = target


class IdentityError(DomainError):
    """Account provisioning failed; ``errors`` maps field names to messages."""
    code = 'identity_error'

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__('; '.join(m for msgs in errors.values() for m in msgs))


def api_exception_handler(exc, context):
    if isinstance(exc, IdentityError):
        return Response({'ok': False, 'error': {'code': exc.code, 'message': exc.errors}}, status=exc.status_code)
    if isinstance(exc, DomainError):
        return Response({'ok': False, 'error': {'code': exc.code, 'message': exc.message}}, status=exc.status_code)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("Unhandled error in %s", context.get('view'))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error.'}}, status=500)
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code, headers=_passthrough_headers(resp))


def _passthrough_headers(resp) -> dict:
    return {k: resp[k] for k in ('WWW-Authenticate', 'Retry-After') if resp.has_header(k)}
