import json

from channels.generic.websocket import AsyncWebsocketConsumer

from portal.services.notifications import user_group


class AlertConsumer(AsyncWebsocketConsumer):
    """Per-user alert channel; urgent alerts for a nurse arrive here."""

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self.close(code=4401)
            return
        self.group = user_group(user.pk)
        await self.channel_layer.group_add(self.group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        group = getattr(self, "group", None)
        if group:
            await self.channel_layer.group_discard(group, self.channel_name)

    async def alert_message(self, event):
        # event: {"type": "alert.message", "payload": {...}}
        await self.send(json.dumps({"type": "alert", **event["payload"]}))
