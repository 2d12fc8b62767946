import pytest
from asgiref.sync import sync_to_async
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from portal.models import User
from portal.realtime.consumers import AlertConsumer
from portal.services.notifications import push_to_user
from portal.tests.factories import make_user

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]


def as_user(user):
    consumer = AlertConsumer.as_asgi()

    async def app(scope, receive, send):
        return await consumer(dict(scope, user=user), receive, send)
    return app


async def test_anonymous_socket_is_closed():
    communicator = WebsocketCommunicator(as_user(AnonymousUser()), "/ws/alerts/")
    connected, code = await communicator.connect()
    assert not connected
    assert code == 4401


async def test_pushed_alert_reaches_user():
    nurse = await database_sync_to_async(make_user)('pushnurse@clinic.com', User.ROLE_NURSE)
    communicator = WebsocketCommunicator(as_user(nurse), "/ws/alerts/")
    connected, _ = await communicator.connect()
    assert connected
    assert await communicator.receive_json_from() == {"type": "welcome", "message": "connected"}

    delivered = await sync_to_async(push_to_user)(nurse.pk, {"department": "Emergency", "room": "E-101"})
    assert delivered
    assert await communicator.receive_json_from() == {"type": "alert", "department": "Emergency", "room": "E-101"}
    await communicator.disconnect()
