"""
Token authentication for the portal API.

Kept apart from the views so that DRF can import the class from
settings without pulling in view modules (avoids circular imports).
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>`` authentication.

    Inactive accounts are rejected by the base class; accounts that
    still carry ``must_change_password`` authenticate normally and are
    held back by the permission classes instead.
    """

    keyword = 'Token'
