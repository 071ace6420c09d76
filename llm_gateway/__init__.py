from __future__ import annotations  # Public surface of the chat-completions gateway

from .llm_gateway import (
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    LlmModelUnsupported,
    LlmOutputInvalid,
    call,
    chat,
    is_model_unsupported,
)

__all__ = [
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "LlmModelUnsupported",
    "LlmOutputInvalid",
    "call",
    "chat",
    "is_model_unsupported",
]
