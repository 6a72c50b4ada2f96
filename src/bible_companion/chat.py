"""Chat assistant client and conversation state.

The gateway makes one chat-completions request per prompt against an
OpenRouter-compatible endpoint. The session keeps the conversation and
turns gateway failures into an apology message.
"""

import logging
from typing import Literal, Optional
import uuid

import httpx
from pydantic import BaseModel, Field

from .config import Settings, get_settings
from .errors import ChatGatewayError

logger = logging.getLogger(__name__)

EMPTY_REPLY = "No response."
APOLOGY = "Sorry, something went wrong while contacting the assistant. Please try again."


class ChatGateway:
    """Async client for the remote chat completion API.

    Usage:
        gateway = ChatGateway()
        reply = await gateway.send_prompt("Who wrote Romans?")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the gateway.

        Args:
            settings: Settings to use (default from config)
            client: Optional pre-built httpx client (tests pass one with a mock transport)
        """
        self.settings = settings or get_settings()
        self._client = client

    @property
    def is_available(self) -> bool:
        return bool(self.settings.openrouter_api_key)

    def build_payload(self, prompt: str) -> dict:
        return {
            "model": self.settings.chat_model,
            "messages": [
                {"role": "system", "content": self.settings.chat_system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.settings.chat_temperature,
        }

    async def send_prompt(self, prompt: str) -> str:
        """Send one prompt and return the assistant's reply.

        Single attempt, no retry.

        Raises:
            ChatGatewayError: On missing credentials, transport errors,
                non-success responses or malformed bodies.
        """
        if not self.is_available:
            raise ChatGatewayError("Chat API key not configured")

        headers = {
            "Authorization": f"Bearer {self.settings.openrouter_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.settings.chat_referer,
            "X-Title": self.settings.chat_title,
        }

        try:
            if self._client is not None:
                response = await self._post(self._client, headers, prompt)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, headers, prompt)
        except httpx.HTTPError as e:
            logger.error("Chat request failed: %s", e)
            raise ChatGatewayError(str(e)) from e

        if not response.is_success:
            logger.error("Chat API error %s: %s", response.status_code, response.text[:200])
            raise ChatGatewayError(f"Chat API error {response.status_code}")

        try:
            result = response.json()
            content = result["choices"][0]["message"].get("content") or ""
            if not isinstance(content, str):
                raise TypeError(f"content is {type(content).__name__}, not str")
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error("Malformed chat response: %s", e)
            raise ChatGatewayError("Malformed chat response") from e

        return content.strip() or EMPTY_REPLY

    async def _post(self, client: httpx.AsyncClient, headers: dict, prompt: str) -> httpx.Response:
        return await client.post(
            self.settings.openrouter_url,
            headers=headers,
            json=self.build_payload(prompt),
            timeout=self.settings.chat_timeout,
        )


class ChatMessage(BaseModel):
    """One message in a conversation."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Literal["user", "assistant", "system"]
    content: str


class ChatSession:
    """A conversation with at most one outstanding request."""

    def __init__(self, gateway: ChatGateway):
        self.gateway = gateway
        self.messages: list[ChatMessage] = []
        self.input = ""
        self.busy = False

    def prefill(self, prompt: Optional[str]) -> None:
        """Put an initial prompt in the input buffer."""
        if prompt:
            self.input = prompt

    async def send(self, text: Optional[str] = None) -> Optional[ChatMessage]:
        """
        Send text (or the input buffer) and append the reply.

        Blank input, or a send while another is in flight, is ignored and
        returns None. Gateway failures append an apology instead.
        """
        prompt = (self.input if text is None else text).strip()
        if not prompt or self.busy:
            return None

        self.messages.append(ChatMessage(role="user", content=prompt))
        self.input = ""
        self.busy = True
        try:
            reply = await self.gateway.send_prompt(prompt)
        except ChatGatewayError as e:
            logger.error("Chat gateway failure: %s", e)
            reply = APOLOGY
        finally:
            self.busy = False

        message = ChatMessage(role="assistant", content=reply)
        self.messages.append(message)
        return message
