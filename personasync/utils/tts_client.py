"""
Text-to-Speech Client Module

Posts text to the text-to-speech endpoint and returns the audio bytes.

Example Usage:
    from personasync.utils.tts_client import TextToSpeechClient

    client = TextToSpeechClient(endpoint="http://localhost:3000/api/text-to-speech")
    audio = await client.synthesize("Welcome to your PersonaSync Dashboard Summary.")

Wire format:
    request:  POST {"text": "..."}
    success:  2xx, body is binary audio
    failure:  non-2xx, body is JSON {"error": "..."}
"""

import logging
from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    before_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

DEFAULT_ERROR = "Failed to generate speech"


class TextToSpeechError(Exception):
    """Raised when the endpoint answers with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_ERROR
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return DEFAULT_ERROR


class TextToSpeechClient:
    """Async client for the text-to-speech endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        max_attempts: int = 3,
        backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize TextToSpeechClient.

        Args:
            endpoint: Full URL of the synthesis endpoint
            timeout: Per-request timeout in seconds
            max_attempts: Attempts on transport errors (connect/read failures)
            backoff: Exponential back-off multiplier in seconds between attempts
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.transport = transport

    async def synthesize(self, text: str) -> bytes:
        """
        Convert ``text`` to audio.

        Returns:
            Audio bytes as returned by the endpoint

        Raises:
            ValueError: If text is empty
            TextToSpeechError: If the endpoint returns a non-2xx status
            httpx.TransportError: If every attempt failed at transport level
        """
        if not text or not text.strip():
            raise ValueError("text must not be empty")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff, max=8),
            retry=retry_if_exception_type(httpx.TransportError),
            before=before_log(logger, logging.DEBUG),
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                response = await self._post(text)

        if response.is_error:
            message = _error_message(response)
            logger.error(
                "tts_request_failed", status_code=response.status_code, error=message
            )
            raise TextToSpeechError(message, status_code=response.status_code)

        logger.info("tts_synthesized", text_length=len(text), audio_bytes=len(response.content))
        return response.content

    async def _post(self, text: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.post(self.endpoint, json={"text": text})
