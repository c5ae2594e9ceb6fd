import asyncio
import itertools

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from chat_relay.logging import logger
from chat_relay.schemas.message import OutboundMessage, TypingIndicator
from chat_relay.settings import app_settings
from chat_relay.utils.metrics import ws_messages_sent_total, ws_send_failures_total

Frame = OutboundMessage | TypingIndicator


def is_open(websocket: WebSocket) -> bool:
    """Check that both sides of the socket are still connected."""
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class ConnectionRegistry:
    """
    Registry of open WebSocket connections.

    Maps each socket to a display identifier (`client-1`, `client-2`, ...)
    that stays unique for the life of the process, and broadcasts frames to
    every open socket.

    The mapping is only touched from the event loop that owns the sockets,
    and every fan-out iterates over a snapshot, so registrations and
    removals during a broadcast cannot corrupt it.
    """

    def __init__(self, id_prefix: str | None = None) -> None:
        """
        Initializes a new instance of the `ConnectionRegistry` class.

        Args:
            id_prefix: Prefix for assigned identifiers. Defaults to the
                CLIENT_ID_PREFIX setting.
        """
        self._prefix = (
            id_prefix
            if id_prefix is not None
            else app_settings.websocket.CLIENT_ID_PREFIX
        )
        self._counter = itertools.count(1)
        self._connections: dict[WebSocket, str] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, websocket: object) -> bool:
        return websocket in self._connections

    def register(self, websocket: WebSocket) -> str:
        """
        Adds a WebSocket connection and assigns it a fresh identifier.

        Registering an already known socket returns its existing identifier.

        Args:
            websocket: The accepted WebSocket connection.

        Returns:
            The identifier assigned to the connection.
        """
        if websocket in self._connections:
            return self._connections[websocket]

        client_id = f"{self._prefix}{next(self._counter)}"
        self._connections[websocket] = client_id
        logger.debug(
            f"websocket object ({id(websocket)}) registered as {client_id}"
        )
        return client_id

    def unregister(self, websocket: WebSocket) -> str | None:
        """
        Removes a WebSocket connection. Unknown sockets are ignored.

        Args:
            websocket: The connection to remove.

        Returns:
            The identifier the connection had, or None if it was not
            registered.
        """
        client_id = self._connections.pop(websocket, None)
        if client_id is not None:
            logger.debug(
                f"websocket object ({id(websocket)}) unregistered ({client_id})"
            )
        return client_id

    def get_client_id(self, websocket: WebSocket) -> str | None:
        """Get the identifier assigned to a socket, if registered."""
        return self._connections.get(websocket)

    def client_ids(self) -> list[str]:
        """Snapshot of the identifiers of all registered sockets."""
        return list(self._connections.values())

    async def send_to(self, websocket: WebSocket, message: Frame) -> bool:
        """
        Sends a frame to a single connection.

        Args:
            websocket: Target connection.
            message: Frame to send.

        Returns:
            True if the frame was written, False if the socket was not open
            or the write failed.
        """
        return await self._safe_send(websocket, message.to_frame())

    async def broadcast(self, message: Frame) -> None:
        """
        Broadcasts a frame to all open connections concurrently.

        The frame is serialized once and the same text is written to every
        registered socket that is still open. Sockets that are closing are
        skipped but stay registered; removal belongs to the disconnect
        handler. A failed write never stops delivery to the others.

        Args:
            message: Frame to broadcast.
        """
        if not self._connections:
            return

        text = message.to_frame()
        connections_snapshot = list(self._connections)

        await asyncio.gather(
            *[self._safe_send(ws, text) for ws in connections_snapshot],
            return_exceptions=True,
        )

    async def _safe_send(self, websocket: WebSocket, text: str) -> bool:
        """
        Write text to one socket, isolating any transport failure.

        Args:
            websocket: Target connection.
            text: Serialized frame.

        Returns:
            Whether the frame was written.
        """
        if not is_open(websocket):
            logger.debug(
                f"Skipping send to closed websocket ({id(websocket)})"
            )
            return False

        client_id = self._connections.get(websocket, "unregistered")
        try:
            await websocket.send_text(text)
        except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
            # WebSocketDisconnect: Client disconnected
            # ConnectionError: Network errors
            # RuntimeError: WebSocket in invalid state
            logger.warning(
                f"Failed to send to connection {id(websocket)} "
                f"(client: {client_id}): {e}"
            )
            ws_send_failures_total.inc()
            return False
        except Exception as e:
            logger.warning(
                f"Unexpected error sending to connection {id(websocket)} "
                f"(client: {client_id}): {e}"
            )
            ws_send_failures_total.inc()
            return False

        ws_messages_sent_total.inc()
        return True


connection_registry = ConnectionRegistry()
