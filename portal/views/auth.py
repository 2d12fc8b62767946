"""
Authentication endpoints.

Login hands out both a DRF token and a JWT pair.  Accounts created by
an administrator carry ``must_change_password``; such users can sign in
but every other endpoint refuses them until they call
``/api/auth/change-password``.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.serializers import TokenRefreshSerializer

from portal.serializers.auth import ChangePasswordSerializer, LoginSerializer
from portal.services.accounts import change_password
from portal.services.audit import log_action
from portal.views.helpers import error

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        logger.warning("Failed login for %s from %s", username, request.META.get('REMOTE_ADDR'))
        log_action(user=None, action='login_failed', entity_name='User',
                   details={'username': username, 'ip': request.META.get('REMOTE_ADDR')})
        return error('invalid_credentials', 'Invalid username or password.', 400)

    log_action(user=user, action='login', entity_name='User', entity_id=user.pk,
               details={'ip': request.META.get('REMOTE_ADDR')})
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'must_change_password': user.must_change_password,
        'user': {
            'id': user.pk,
            'username': user.username,
            'name': user.display_name,
            'role': user.role,
        },
    })

# ScopedRateThrottle reads the scope off the wrapped view class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    """Exchange a refresh token for a new access token."""
    s = TokenRefreshSerializer(data={'refresh': request.data.get('refresh') or ''})
    try:
        s.is_valid(raise_exception=True)
    except TokenError:
        return error('token_not_valid', 'Refresh token is invalid or expired.', 401)
    data = dict(s.validated_data)
    data['jwt_access'] = data.pop('access')
    if 'refresh' in data:
        data['jwt_refresh'] = data.pop('refresh')
    return Response({'ok': True, **data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist one refresh token, or all of the caller's outstanding ones."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError:
            return error('token_not_valid', 'Refresh token is invalid or expired.', 400)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', entity_name='User', entity_id=request.user.pk)
    return Response({'ok': True, 'blacklisted': count})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    s = ChangePasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    change_password(request.user, current_password=s.validated_data['current_password'],
                    new_password=s.validated_data['new_password'])
    return Response({'ok': True})
