import asyncio
import time
from typing import Any

import httpx

from chat_relay.exceptions import ProviderNotConfiguredError, ProviderResponseError
from chat_relay.logging import logger
from chat_relay.schemas.generation import (
    GenerationFallback,
    GenerationOk,
    GenerationResult,
)
from chat_relay.settings import app_settings
from chat_relay.settings.models import AISettings
from chat_relay.utils.metrics import (
    ai_generation_duration_seconds,
    ai_generation_total,
)


class AIResponder:
    """
    Text generation through the Gemini `generateContent` REST API.

    `generate()` never raises: a missing credential or any provider failure
    turns into a fixed fallback text, so callers need no special case for
    "not configured" versus "call failed". Every call is a single attempt,
    there are no retries and no rate limiting.
    """

    def __init__(
        self,
        settings: AISettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the responder.

        Args:
            settings: Provider configuration. Defaults to the application
                settings.
            client: HTTP client to use. A client owned by the responder is
                created lazily when omitted.
        """
        self.settings = settings or app_settings.ai
        self._client = client
        self._owns_client = client is None
        self._client_lock = asyncio.Lock()

        if self.settings.is_configured:
            logger.info(
                f"Gemini AI responder initialized (model: {self.settings.MODEL})"
            )
        else:
            logger.error(
                "GOOGLE_API_KEY is not defined, AI replies will use the fallback text"
            )

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def _get_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.settings.REQUEST_TIMEOUT)
                )
                self._owns_client = True
            return self._client

    async def generate(self, prompt: str) -> str:
        """
        Generate a reply for a prompt.

        Args:
            prompt: User text, possibly empty.

        Returns:
            Completion text, or a fixed fallback text on any failure.
        """
        result = await self.generate_result(prompt)
        return result.text

    async def generate_result(self, prompt: str) -> GenerationResult:
        """
        Generate a reply and report how it was obtained.

        Args:
            prompt: User text, possibly empty.

        Returns:
            GenerationOk with the completion, or GenerationFallback with
            the reason the provider could not be used.
        """
        start_time = time.time()
        try:
            text = await self._request_completion(prompt)
            result: GenerationResult = GenerationOk(text=text)
            logger.info(f'Generated response for prompt: "{prompt}"')
        except ProviderNotConfiguredError:
            logger.error("Gemini model not initialized. Cannot generate text.")
            result = GenerationFallback(reason="not_configured")
        except ProviderResponseError as ex:
            logger.warning(f"Gemini returned no usable text: {ex}")
            result = GenerationFallback(reason="empty_response", detail=str(ex))
        except asyncio.CancelledError:
            raise
        except Exception as ex:
            logger.exception(f"Error generating text: {ex}")
            result = GenerationFallback(reason="provider_error", detail=str(ex))
        finally:
            ai_generation_duration_seconds.observe(time.time() - start_time)

        ai_generation_total.labels(outcome=result.outcome).inc()
        return result

    async def _request_completion(self, prompt: str) -> str:
        """
        Perform one generateContent call.

        Raises:
            ProviderNotConfiguredError: No credential available.
            ProviderResponseError: Response carried no text.
            httpx.HTTPError: Transport failure or non-2xx status.
        """
        if not self.is_configured:
            raise ProviderNotConfiguredError("GOOGLE_API_KEY is not set")

        client = await self._get_client()
        response = await client.post(
            self.settings.generate_url,
            headers={
                "x-goog-api-key": self.settings.API_KEY.get_secret_value()  # type: ignore[union-attr]
            },
            json={"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
            timeout=self.settings.REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        return extract_text(response.json())

    async def aclose(self) -> None:
        """Close the HTTP client if the responder created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


def extract_text(payload: Any) -> str:
    """
    Pull the completion text out of a generateContent response.

    The parts of the first candidate are concatenated, the same way the
    official SDKs build `response.text`.

    Raises:
        ProviderResponseError: The response has no candidate text, e.g. a
            prompt blocked by safety filters.
    """
    try:
        candidates = payload.get("candidates") or []
        if not candidates:
            feedback = payload.get("promptFeedback", {})
            raise ProviderResponseError(
                f"no candidates (blockReason: {feedback.get('blockReason')})"
            )
        parts = candidates[0].get("content", {}).get("parts") or []
        texts = [part["text"] for part in parts if isinstance(part.get("text"), str)]
    except (AttributeError, TypeError, KeyError) as ex:
        raise ProviderResponseError(f"unexpected response shape: {ex}") from ex

    if not texts:
        raise ProviderResponseError(
            f"candidate has no text (finishReason: {candidates[0].get('finishReason')})"
        )
    return "".join(texts)


ai_responder = AIResponder()
