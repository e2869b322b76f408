import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from .services import RESULTS_GROUP, get_engine, get_results_payload

logger = logging.getLogger(__name__)


class ResultsConsumer(AsyncWebsocketConsumer):
    """
    Live results dashboard.
    Sends the full results on connect, then again after every vote.
    """

    @database_sync_to_async
    def get_initial_data(self):
        return get_results_payload(get_engine())

    async def connect(self):
        await self.channel_layer.group_add(RESULTS_GROUP, self.channel_name)
        await self.accept()

        logger.debug("Client connected to %s.", RESULTS_GROUP)
        initial_data = await self.get_initial_data()
        await self.send(text_data=json.dumps(initial_data))

    async def disconnect(self, close_code):
        logger.debug("Client disconnected from %s (code %s).", RESULTS_GROUP, close_code)
        await self.channel_layer.group_discard(RESULTS_GROUP, self.channel_name)

    # Called by group_send in services.broadcast_results
    # ("results.update" -> results_update()).
    async def results_update(self, event):
        await self.send(text_data=json.dumps(event['payload']))
