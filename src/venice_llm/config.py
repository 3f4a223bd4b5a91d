"""Construction-time configuration for the Venice adapter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from venice_llm.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.venice.ai"
DEFAULT_MODEL = "llama-3.3-70b"


@dataclass
class AdapterConfig:
    """Settings one VeniceAdapter is built with.

    Attributes:
        model: Model name sent as the ``model`` field.
        api_key: Bearer credential for the ``Authorization`` header.
        base_url: Vendor base URL; the completion path is appended to it.
        default_streaming: Default for the ``stream`` field.
        default_user: Default for the ``user`` field.
        vendor_extras: Extra default wire options, overridable per request.
        timeout_seconds: HTTP timeout used by the transport.

    Raises:
        ConfigurationError: If the model or base URL is empty, or the
            timeout is not positive.
    """

    model: str = DEFAULT_MODEL
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    default_streaming: bool = True
    default_user: str = "venice-llm"
    vendor_extras: dict[str, Any] = field(default_factory=lambda: {"temperature": 0.7})
    timeout_seconds: float = 60.0

    def __post_init__(self) -> None:
        if not self.model:
            raise ConfigurationError("model must not be empty")
        if not self.base_url:
            raise ConfigurationError("base_url must not be empty")
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"timeout_seconds must be > 0, got {self.timeout_seconds}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> AdapterConfig:
        """Create a config from environment variables.

        Environment variables:
            VENICE_API_KEY: API key (required)
            VENICE_BASE_URL: Base URL, defaults to the public API
            VENICE_MODEL: Model name
            VENICE_USER: Value for the ``user`` field

        Keyword overrides win over the environment.

        Raises:
            ConfigurationError: If no API key is available.
        """
        values: dict[str, Any] = {
            "api_key": os.environ.get("VENICE_API_KEY", ""),
            "base_url": os.environ.get("VENICE_BASE_URL") or DEFAULT_BASE_URL,
            "model": os.environ.get("VENICE_MODEL") or DEFAULT_MODEL,
        }
        user = os.environ.get("VENICE_USER")
        if user:
            values["user"] = user
        values.update(overrides)
        if "user" in values:
            values["default_user"] = values.pop("user")
        if not values["api_key"]:
            raise ConfigurationError("VENICE_API_KEY is not set")
        return cls(**values)
