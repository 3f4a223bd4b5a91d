"""Venice AI completion adapter - payload building and stream decoding."""

from __future__ import annotations

from venice_llm.adapters import VendorAdapter, VeniceAdapter
from venice_llm.config import AdapterConfig
from venice_llm.decoding import StreamFrameDecoder
from venice_llm.dedup import ToolCallDeduplicator
from venice_llm.errors import (
    AuthenticationError,
    ConfigurationError,
    InsufficientBalanceError,
    InvalidRequestError,
    InvalidResponseError,
    ModelCapacityError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    StreamError,
    VeniceAPIError,
    VeniceError,
)
from venice_llm.models import (
    CanonicalPrompt,
    CompletionEvent,
    CompletionResult,
    EventKind,
    Finish,
    PromptMessage,
    Role,
    TextDelta,
    TokenUsage,
    ToolCall,
    ToolChoice,
    ToolDefinition,
    ToolingContext,
)
from venice_llm.payload import (
    VENICE_PARAMETER_RENAMES,
    build_payload,
    normalize_parameters,
    prune_absent,
)
from venice_llm.processor import MessageProcessor
from venice_llm.streaming import ResponseDecoder, StreamCollector

__all__ = [
    # Adapters
    "VendorAdapter",
    "VeniceAdapter",
    "AdapterConfig",
    # Request side
    "VENICE_PARAMETER_RENAMES",
    "build_payload",
    "normalize_parameters",
    "prune_absent",
    # Response side
    "StreamFrameDecoder",
    "MessageProcessor",
    "ToolCallDeduplicator",
    "ResponseDecoder",
    "StreamCollector",
    # Errors
    "AuthenticationError",
    "ConfigurationError",
    "InsufficientBalanceError",
    "InvalidRequestError",
    "InvalidResponseError",
    "ModelCapacityError",
    "NetworkError",
    "NotFoundError",
    "RateLimitError",
    "RequestTimeoutError",
    "ServerError",
    "StreamError",
    "VeniceAPIError",
    "VeniceError",
    # Models
    "CanonicalPrompt",
    "CompletionEvent",
    "CompletionResult",
    "EventKind",
    "Finish",
    "PromptMessage",
    "Role",
    "TextDelta",
    "TokenUsage",
    "ToolCall",
    "ToolChoice",
    "ToolDefinition",
    "ToolingContext",
]
