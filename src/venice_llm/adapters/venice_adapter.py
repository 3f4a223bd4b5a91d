"""Venice AI adapter for the OpenAI-compatible chat-completions API."""

from __future__ import annotations

import contextlib
import json
import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

import httpx

from venice_llm.config import AdapterConfig
from venice_llm.errors import (
    InvalidResponseError,
    NetworkError,
    RequestTimeoutError,
    VeniceAPIError,
    error_from_status,
)
from venice_llm.models import CanonicalPrompt, CompletionEvent, ToolingContext
from venice_llm.payload import VENICE_PARAMETER_RENAMES, build_payload, normalize_parameters
from venice_llm.processor import MessageProcessor
from venice_llm.streaming import ResponseDecoder

logger = logging.getLogger(__name__)

COMPLETION_PATH = "/api/v1/chat/completions"


def _extract_retry_after(response: httpx.Response) -> float | None:
    """Extract the Retry-After header as seconds."""
    retry_str = response.headers.get("retry-after")
    if retry_str is None:
        return None
    try:
        return float(retry_str)
    except ValueError:
        return None


class VeniceAdapter:
    """Adapter for the Venice AI chat-completions endpoint.

    Vendor knowledge lives in the rename table and in ``default_options``;
    the frame decoder and message processor it drives are vendor-agnostic.
    The HTTP transport sends exactly one request per call and never retries.

    Args:
        config: Model, credentials, base URL and default options.
        renames: Canonical to vendor parameter names.
        client: Optional shared ``httpx.AsyncClient``; when omitted a client
            is opened per request.
    """

    _PROVIDERS = ("venice",)

    def __init__(
        self,
        config: AdapterConfig,
        *,
        renames: Mapping[str, str] = VENICE_PARAMETER_RENAMES,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.renames = dict(renames)
        self._client = client

    @classmethod
    def can_contact(cls, model_provider: str) -> bool:
        """Check whether this adapter serves *model_provider*."""
        return model_provider in cls._PROVIDERS

    def provider_name(self) -> str:
        return "venice"

    # -----------------------------------------------------------------
    # Request mapping
    # -----------------------------------------------------------------

    def default_options(self) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "stream": self.config.default_streaming,
            "user": self.config.default_user,
            **self.config.vendor_extras,
        }

    def normalize_parameters(self, params: Mapping[str, Any] | None) -> dict[str, Any]:
        return normalize_parameters(params, self.renames)

    def build_payload(
        self,
        prompt: CanonicalPrompt,
        params: Mapping[str, Any] | None = None,
        tooling: ToolingContext | None = None,
    ) -> dict[str, Any]:
        """Build the request body for *prompt*.

        Args:
            prompt: Conversation history and tool declarations.
            params: Caller overrides; canonical names are renamed.
            tooling: Disables native tools when XML emulation is in use.

        Returns:
            The payload with no None values at any depth.
        """
        return build_payload(
            prompt,
            params,
            tooling,
            default_options=self.default_options(),
            renames=self.renames,
        )

    def endpoint_url(self) -> str:
        """Base URL with the completion path appended unless already there."""
        base = self.config.base_url.rstrip("/")
        segments = COMPLETION_PATH.strip("/").split("/")
        for size in range(len(segments), 0, -1):
            if base.endswith("/" + "/".join(segments[:size])):
                rest = segments[size:]
                return base + "/" + "/".join(rest) if rest else base
        return base + COMPLETION_PATH

    def request_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    # -----------------------------------------------------------------
    # Response mapping
    # -----------------------------------------------------------------

    def new_decoder(self, partial_tool_calls: bool = False) -> ResponseDecoder:
        return ResponseDecoder(partial_tool_calls=partial_tool_calls)

    def decode(self, body: str | bytes) -> list[CompletionEvent]:
        """Decode a complete non-streamed response body.

        Raises:
            InvalidResponseError: If the body is not JSON.
        """
        try:
            obj = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidResponseError(f"Response body is not JSON: {exc}") from exc
        return MessageProcessor().process_message(obj)

    def _status_error(self, response: httpx.Response) -> VeniceAPIError:
        try:
            body = response.json()
        except ValueError:
            body = response.text
        return error_from_status(
            response.status_code, body, retry_after=_extract_retry_after(response)
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    @contextlib.asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
            yield client

    async def complete(
        self,
        prompt: CanonicalPrompt,
        params: Mapping[str, Any] | None = None,
        tooling: ToolingContext | None = None,
    ) -> list[CompletionEvent]:
        """Send a non-streaming request and decode the whole response.

        Raises:
            VeniceAPIError: Translated from the HTTP status.
            RequestTimeoutError: If the request timed out.
            NetworkError: On connection failures.
            InvalidResponseError: If the body is not JSON.
        """
        payload = self.build_payload(prompt, params, tooling)
        payload["stream"] = False
        url = self.endpoint_url()
        logger.debug(
            "POST %s model=%s messages=%d", url, payload.get("model"), len(payload["messages"])
        )
        try:
            async with self._http() as client:
                response = await client.post(url, headers=self.request_headers(), json=payload)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(str(exc)) from exc
        except httpx.TransportError as exc:
            raise NetworkError(str(exc)) from exc

        if response.status_code >= 400:
            raise self._status_error(response)
        return self.decode(response.content)

    async def stream(
        self,
        prompt: CanonicalPrompt,
        params: Mapping[str, Any] | None = None,
        tooling: ToolingContext | None = None,
        partial_tool_calls: bool = False,
    ) -> AsyncIterator[CompletionEvent]:
        """Send a streaming request, yielding events as they arrive.

        Raises:
            VeniceAPIError: Translated from the HTTP status.
            RequestTimeoutError: If the request or stream timed out.
            NetworkError: On connection failures.
        """
        payload = self.build_payload(prompt, params, tooling)
        payload["stream"] = True
        url = self.endpoint_url()
        decoder = self.new_decoder(partial_tool_calls=partial_tool_calls)
        logger.debug(
            "POST %s model=%s messages=%d (stream)",
            url,
            payload.get("model"),
            len(payload["messages"]),
        )
        try:
            async with self._http() as client:
                async with client.stream(
                    "POST", url, headers=self.request_headers(), json=payload
                ) as response:
                    if response.status_code >= 400:
                        await response.aread()
                        raise self._status_error(response)
                    async for chunk in response.aiter_text():
                        for event in decoder.feed(chunk):
                            yield event
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(str(exc)) from exc
        except httpx.TransportError as exc:
            raise NetworkError(str(exc)) from exc

        for event in decoder.finish():
            yield event
