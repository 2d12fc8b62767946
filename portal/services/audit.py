from typing import Optional, Any, Dict

from django.contrib.auth import get_user_model
from django.db.models import QuerySet

from portal.models import AuditLog
from portal.unit_of_work import UnitOfWork

User = get_user_model()


def log_action(*, user: Optional[User], action: str, entity_name: str, entity_id: Any = None,
               details: Optional[Dict[str, Any]] = None) -> AuditLog:
    return AuditLog.objects.create(
        performed_by=user if getattr(user, 'pk', None) else None,
        action=action,
        entity_name=entity_name,
        entity_id='' if entity_id is None else str(entity_id),
        details=details or {},
    )


def list_logs(*, entity_name: Optional[str] = None, entity_id: Any = None, action: Optional[str] = None) -> QuerySet:
    uow = UnitOfWork()
    if entity_name and entity_id is not None:
        qs = uow.audit_logs.for_entity(entity_name, entity_id)
    else:
        qs = uow.audit_logs.list_all()
        if entity_name:
            qs = qs.filter(entity_name=entity_name)
    if action:
        qs = qs.filter(action=action)
    return qs
