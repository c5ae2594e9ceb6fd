import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

from starlette.websockets import WebSocket

from chat_relay.constants import (
    AI_ERROR_TEXT,
    INVALID_MESSAGE_TEXT,
    PROCESSING_ERROR_TEXT,
)
from chat_relay.exceptions import InvalidMessageError
from chat_relay.logging import logger
from chat_relay.managers.ai_responder import ai_responder
from chat_relay.managers.connection_registry import (
    ConnectionRegistry,
    connection_registry,
)
from chat_relay.schemas.message import (
    InboundMessage,
    OutboundMessage,
    TypingIndicator,
)
from chat_relay.settings import app_settings
from chat_relay.utils.metrics import (
    ws_message_processing_duration_seconds,
    ws_messages_received_total,
    ws_messages_rejected_total,
)


class TextGenerator(Protocol):
    """Anything that turns a prompt into reply text without raising."""

    async def generate(self, prompt: str) -> str: ...


class MessageRelay:
    """
    Turns one inbound frame into the echo and bot-reply broadcasts.

    Per frame: parse, broadcast the user echo, generate a reply, broadcast
    the reply. A responder that raises still yields a bot reply carrying
    the fixed error text. Invalid frames and failures to deliver the echo
    or the reply produce a single `server_info` frame to the sender.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        responder: TextGenerator,
        typing_indicator: bool | None = None,
        bot_reply_scope: str | None = None,
    ) -> None:
        """
        Args:
            registry: Registry used for broadcasts and unicasts.
            responder: Reply generator.
            typing_indicator: Emit `aiTyping` frames to the sender around
                generation. Defaults to the WS_TYPING_INDICATOR setting.
            bot_reply_scope: "all" broadcasts the reply, "sender" sends it
                to the originating connection only. Defaults to the
                BOT_REPLY_SCOPE setting.
        """
        ws_settings = app_settings.websocket
        self.registry = registry
        self.responder = responder
        self.typing_indicator = (
            ws_settings.TYPING_INDICATOR
            if typing_indicator is None
            else typing_indicator
        )
        self.bot_reply_scope = bot_reply_scope or ws_settings.BOT_REPLY_SCOPE

    async def handle_frame(
        self,
        websocket: WebSocket,
        raw: str | bytes | None,
        client_id: str | None = None,
    ) -> None:
        """
        Process one inbound frame end to end.

        Never raises: every failure is logged and reported to the sender
        as a generic `server_info` frame.

        Args:
            websocket: Connection the frame arrived on.
            raw: Frame payload as received.
            client_id: Identifier of the sending connection. Looked up in
                the registry when omitted; frames processed after the
                connection was unregistered must pass it.
        """
        ws_messages_received_total.inc()
        client_id = (
            client_id
            or self.registry.get_client_id(websocket)
            or "unregistered"
        )

        try:
            message = InboundMessage.parse_frame(raw)
        except InvalidMessageError as ex:
            logger.debug(
                f"Received invalid frame from {client_id} ({ex.reason}): {ex}"
            )
            ws_messages_rejected_total.labels(reason=ex.reason).inc()
            await self.registry.send_to(
                websocket, OutboundMessage.server_info(INVALID_MESSAGE_TEXT)
            )
            return

        logger.debug(f"Message received from {client_id}: {message.text!r}")
        start_time = time.time()
        try:
            await self.registry.broadcast(
                OutboundMessage.user_echo(message.text, client_id)
            )

            async with self.typing(websocket):
                reply = await self._generate(message.text, client_id)
            logger.debug(f"AI response for {client_id}: {reply!r}")

            await self._deliver_reply(websocket, reply, client_id)
        except Exception:
            logger.exception(f"Failed to process message from {client_id}")
            await self.registry.send_to(
                websocket, OutboundMessage.server_info(PROCESSING_ERROR_TEXT)
            )
        finally:
            ws_message_processing_duration_seconds.observe(
                time.time() - start_time
            )

    async def _generate(self, prompt: str, client_id: str) -> str:
        try:
            return await self.responder.generate(prompt)
        except Exception:
            logger.exception(f"AI responder failed for {client_id}")
            return AI_ERROR_TEXT

    async def _deliver_reply(
        self, websocket: WebSocket, reply: str, client_id: str
    ) -> None:
        bot_message = OutboundMessage.bot_reply(reply, client_id)
        if self.bot_reply_scope == "sender":
            await self.registry.send_to(websocket, bot_message)
        else:
            await self.registry.broadcast(bot_message)

    @asynccontextmanager
    async def typing(self, websocket: WebSocket) -> AsyncIterator[None]:
        """
        Show the typing indicator to one client for the duration of a block.

        The indicator is cleared whether the block succeeds or raises.
        """
        if not self.typing_indicator:
            yield
            return

        await self.registry.send_to(websocket, TypingIndicator(is_typing=True))
        try:
            yield
        finally:
            await self.registry.send_to(
                websocket, TypingIndicator(is_typing=False)
            )


message_relay = MessageRelay(connection_registry, ai_responder)
