from __future__ import annotations

from django.core.cache import cache

from portal.models import FAQEntry
from portal.services.audit import log_action
from portal.services.common import apply_changes, found
from portal.unit_of_work import UnitOfWork

LIST_CACHE_KEY = 'faq:list'


def invalidate_cache() -> None:
    cache.delete(LIST_CACHE_KEY)


def list_entries():
    return UnitOfWork().faq_entries.list_all()


def get_entry(pk):
    return UnitOfWork().faq_entries.get_by_id(pk)


def create_entry(actor, data: dict) -> FAQEntry:
    with UnitOfWork() as uow:
        entry = uow.faq_entries.add(FAQEntry(**data))
        log_action(user=actor, action='create', entity_name='FAQEntry', entity_id=entry.pk)
    invalidate_cache()
    return entry


def update_entry(actor, pk, data: dict) -> FAQEntry:
    with UnitOfWork() as uow:
        entry = found(uow.faq_entries.get_by_id(pk), 'FAQEntry', pk)
        uow.faq_entries.update(apply_changes(entry, data))
        log_action(user=actor, action='update', entity_name='FAQEntry', entity_id=pk)
    invalidate_cache()
    return entry


def delete_entry(actor, pk) -> None:
    with UnitOfWork() as uow:
        entry = found(uow.faq_entries.get_by_id(pk), 'FAQEntry', pk)
        uow.faq_entries.delete(entry)
        log_action(user=actor, action='delete', entity_name='FAQEntry', entity_id=pk)
    invalidate_cache()
