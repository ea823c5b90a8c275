"""HTTP client for an OpenAI-compatible chat-completions endpoint."""

from typing import Any, Dict, List, Optional, Sequence, TypedDict

import httpx

from completion.exceptions import CompletionError
from settings import settings
from utils.logging import logger

TEMPERATURE = 0.7
MAX_TOKENS = 2048
GENERIC_ERROR_MESSAGE = "Completion API request failed"
UNEXPECTED_BODY_MESSAGE = "Completion API returned an unexpected body"


class TranscriptEntry(TypedDict):
    """One ``{role, content}`` turn as sent to the completion service."""

    role: str
    content: str


class CompletionClient:
    """Sends a transcript to the completion endpoint and returns the reply text.

    Each call is exactly one POST: no streaming, retries or backoff, and no
    timeout other than the transport default.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, api_url: Optional[str] = None):
        """Initialize the client.

        Args:
            http_client: Shared ``httpx.AsyncClient``; one is created when omitted
            api_url: Chat-completions URL, defaults to the configured one
        """
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient()
        self.api_url = api_url or settings.completion_api_url

    @staticmethod
    def build_payload(model: str, transcript: Sequence[TranscriptEntry]) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": entry["role"], "content": entry["content"]} for entry in transcript],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }

    async def complete(self, api_key: str, model: str, transcript: Sequence[TranscriptEntry]) -> str:
        """Request a completion for the full transcript.

        Args:
            api_key: Bearer credential for the completion service
            model: Model identifier selected by the user
            transcript: Ordered ``{role, content}`` turns, sent untruncated

        Returns:
            The first choice's message content, or an empty string when the
            response carries no choices.

        Raises:
            CompletionError: On a non-success status, a transport failure or a
                malformed response body
        """
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(model, transcript)

        logger.info(f"Requesting completion from {self.api_url} with model {model} ({len(payload['messages'])} messages)")
        try:
            response = await self._http.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Completion request transport error: {str(e)}")
            raise CompletionError(str(e) or GENERIC_ERROR_MESSAGE)

        if not response.is_success:
            message = self._extract_error_message(response)
            logger.error(f"Completion request failed with status {response.status_code}: {message}")
            raise CompletionError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise CompletionError("Completion API returned a non-JSON body", status_code=response.status_code)

        return self._extract_reply(data, response.status_code)

    @staticmethod
    def _extract_error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return GENERIC_ERROR_MESSAGE

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return GENERIC_ERROR_MESSAGE

    @staticmethod
    def _extract_reply(data: Any, status_code: int) -> str:
        choices: List[Any] = []
        if isinstance(data, dict):
            choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise CompletionError(UNEXPECTED_BODY_MESSAGE, status_code=status_code)
        if not choices:
            logger.warning("Completion response contained no choices")
            return ""

        choice = choices[0]
        if not isinstance(choice, dict):
            raise CompletionError(UNEXPECTED_BODY_MESSAGE, status_code=status_code)

        message = choice.get("message") or {}
        if not isinstance(message, dict):
            raise CompletionError(UNEXPECTED_BODY_MESSAGE, status_code=status_code)

        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise CompletionError(UNEXPECTED_BODY_MESSAGE, status_code=status_code)
        return content

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()
