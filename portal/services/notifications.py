"""
Outbound notifications: email through Django's mail framework and
realtime pushes through the Channels layer.

Delivery is best effort.  A failed send is logged and reported as
``False``; it never rolls back or fails the write that triggered it.
"""
from __future__ import annotations

import logging
from typing import Any

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def user_group(user_id: Any) -> str:
    return f"alerts.user.{user_id}"


def send_email(to: str, subject: str, body: str) -> bool:
    if not to:
        logger.warning("Skipping email %r: no recipient", subject)
        return False
    try:
        sent = send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [to], fail_silently=False)
    except Exception:
        logger.exception("Failed to send email %r to %s", subject, to)
        return False
    logger.info("Sent email %r to %s", subject, to)
    return sent > 0


def push_to_user(user_id: Any, payload: dict) -> bool:
    layer = get_channel_layer()
    if layer is None:
        return False
    try:
        async_to_sync(layer.group_send)(user_group(user_id), {'type': 'alert.message', 'payload': payload})
    except Exception:
        logger.exception("Failed to push realtime alert to user %s", user_id)
        return False
    return True
