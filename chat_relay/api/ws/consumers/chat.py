from typing import Any

from fastapi import APIRouter
from starlette.websockets import WebSocket

from chat_relay.api.ws.websocket import RelayWebSocketEndpoint
from chat_relay.managers.message_relay import MessageRelay, message_relay

router = APIRouter()


@router.websocket_route("/ws")
class Chat(RelayWebSocketEndpoint):
    """
    Chat WebSocket endpoint.

    Every text frame `{"text": ...}` is echoed to all connected clients
    and answered by the AI bot, see `MessageRelay.handle_frame`.
    """

    relay: MessageRelay = message_relay

    async def process(self, websocket: WebSocket, data: Any) -> None:
        # Frames still queued after disconnect keep the sender's id
        await self.relay.handle_frame(websocket, data, client_id=self.client_id)
