import asyncio
from typing import Any

from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket

from chat_relay.constants import WELCOME_TEMPLATE, WS_POLICY_VIOLATION_CODE
from chat_relay.logging import logger, set_log_context
from chat_relay.managers.connection_registry import (
    ConnectionRegistry,
    connection_registry,
)
from chat_relay.schemas.message import OutboundMessage
from chat_relay.settings import app_settings
from chat_relay.utils.metrics import ws_connections_active, ws_connections_total


def origin_allowed(websocket: WebSocket, allowed_origins: list[str]) -> bool:
    """
    Check the Origin header of the upgrade request against an allow-list.

    A "*" entry allows everything; requests without an Origin header
    (non-browser clients) are always allowed.
    """
    if "*" in allowed_origins:
        return True
    origin = websocket.headers.get("origin")
    return origin is None or origin in allowed_origins


class RelayWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint that keeps the connection registry up to date.

    Accepts the socket, registers it under a fresh client ID, greets it and
    unregisters it when it goes away. Subclasses implement `process`.

    Inbound frames are handed to `spawn`, which runs them as tasks, so the
    receive loop keeps reading (and notices a disconnect) while a frame is
    still being processed. Frames of one connection are processed in
    arrival order under `frame_lock`.
    """

    encoding = None  # Binary frames are passed through and rejected later
    registry: ConnectionRegistry = connection_registry

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.client_id: str | None = None
        self.frame_lock = asyncio.Lock()
        self.pending: set[asyncio.Task[None]] = set()

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> str | bytes | None:
        """
        Return the raw frame payload without decoding.

        Parsing is done per frame by the relay so that malformed frames
        can be answered instead of closing the connection.
        """
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes")

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Handles WebSocket client connection.

        This method performs the following tasks:
        1. Rejects upgrade requests from disallowed origins
        2. Accepts the connection
        3. Registers the connection and stores its client ID in the log context
        4. Sends the welcome frame carrying the client ID
        """
        if not origin_allowed(
            websocket, app_settings.websocket.ALLOWED_ORIGINS
        ):
            logger.warning(
                f"Rejected websocket from origin {websocket.headers.get('origin')}"
            )
            ws_connections_total.labels(status="rejected_origin").inc()
            await websocket.close(code=WS_POLICY_VIOLATION_CODE)
            return

        await websocket.accept()

        self.client_id = self.registry.register(websocket)
        set_log_context(client_id=self.client_id)
        ws_connections_total.labels(status="accepted").inc()
        ws_connections_active.inc()
        logger.info(f"Client connected: {self.client_id}")

        await self.registry.send_to(
            websocket,
            OutboundMessage.server_info(
                WELCOME_TEMPLATE.format(client_id=self.client_id),
                client_id=self.client_id,
            ),
        )

    async def on_receive(self, websocket: WebSocket, data: Any) -> None:
        self.spawn(websocket, data)

    def spawn(self, websocket: WebSocket, data: Any) -> None:
        """Schedule processing of one frame without blocking the receive loop."""
        task = asyncio.create_task(self._process_in_order(websocket, data))
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)

    async def _process_in_order(self, websocket: WebSocket, data: Any) -> None:
        async with self.frame_lock:
            await self.process(websocket, data)

    async def process(self, websocket: WebSocket, data: Any) -> None:
        raise NotImplementedError()  # pragma: no cover

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Handles WebSocket client disconnection and cleanup.

        The connection is unregistered first so pending broadcasts skip it.
        Frames still being processed are not cancelled: they finish and
        their replies reach the remaining connections.
        """
        if self.client_id is None:
            return

        self.registry.unregister(websocket)
        ws_connections_active.dec()
        logger.info(
            f"Client disconnected: {self.client_id} (code {close_code})"
        )

        if self.pending:
            logger.debug(
                f"Waiting for {len(self.pending)} in-flight frame(s) of {self.client_id}"
            )
            # Cancelling this handler must not cancel the frames themselves
            await asyncio.shield(
                asyncio.gather(*self.pending, return_exceptions=True)
            )

