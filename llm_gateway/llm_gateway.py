from __future__ import annotations  # Chat-completions gateway for evaluation model routes

import json
import logging
import os
import threading
from contextlib import nullcontext
from typing import Any, ContextManager, Dict, List, Optional, Protocol, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


_ROUTE_LOCKS: Dict[str, threading.Lock] = {}
_ROUTE_LOCKS_GUARD = threading.Lock()

# Error-body fragments that mean "this route does not serve the requested model"
UNSUPPORTED_MARKERS = (
    "model not supported",
    "unsupported model",
    "model is not supported",
    "model_not_found",
    "does not exist",
    "unknown model",
)


class HttpClient(Protocol):  # Anything with an httpx-like post()
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Transport, status or payload failure
    pass


class LlmModelUnsupported(LlmGatewayError):  # Route rejected the configured model
    def __init__(self, route: str, model: str) -> None:
        super().__init__(f"Model '{model}' unsupported by route '{route}'")
        self.route = route
        self.model = model


class LlmOutputInvalid(LlmGatewayError):  # Reply never matched the schema within the retry budget
    pass


T = TypeVar("T", bound=BaseModel)


def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Single user-turn request validated against schema
    return chat([{"role": "user", "content": task}], schema, cfg=cfg, client=client, options=options)


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:
    """Send ``messages`` to the route and return the reply parsed as ``schema``.

    Replies that fail validation are retried up to ``cfg.max_retries`` times,
    each retry carrying a system hint with the previous error. Non-2xx
    statuses are not retried.
    """

    with _route_guard(cfg):
        return _complete(_normalize_messages(messages), schema, cfg, client, options or {})


def _route_guard(cfg: LlmRoute) -> ContextManager[Any]:  # Serialize calls on routes marked sequential
    if not cfg.sequential:
        return nullcontext()
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _ROUTE_LOCKS_GUARD:
        lock = _ROUTE_LOCKS.setdefault(key, threading.Lock())
    return lock


def _complete(
    messages: List[Dict[str, str]],
    schema: Type[T],
    cfg: LlmRoute,
    client: Optional[HttpClient],
    options: Dict[str, Any],
) -> T:
    conversation = _schema_preamble(schema) + messages if cfg.enforce_json else list(messages)
    attempts = cfg.max_retries + 1
    logger.info(
        "LLM call route=%s model=%s attempts=%d prompt=%s",
        cfg.name,
        cfg.model,
        attempts,
        _clip(_first_user_line(conversation), 120),
    )
    failure: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        turn = list(conversation)
        if failure is not None:
            turn.append({"role": "system", "content": _retry_hint(str(failure), cfg.enforce_json)})
        data = _send(cfg, _request_body(cfg, turn, options), client)
        try:
            parsed = schema.model_validate_json(_strip_code_fences(_extract_content(data)))
        except (ValidationError, LlmOutputInvalid) as exc:
            failure = exc
            logger.warning("LLM reply rejected route=%s attempt=%d/%d: %s", cfg.name, attempt, attempts, _clip(str(exc), 200))
            continue
        logger.info("LLM call done route=%s model=%s attempt=%d", cfg.name, cfg.model, attempt)
        return parsed
    raise LlmOutputInvalid(f"Route '{cfg.name}' returned invalid output {attempts} time(s)") from failure


def _schema_preamble(schema: Type[BaseModel]) -> List[Dict[str, str]]:
    schema_json = json.dumps(schema.model_json_schema(), indent=2)
    return [{"role": "system", "content": "Reply with a single JSON object matching this schema:\n" + schema_json}]


def _request_body(cfg: LlmRoute, messages: List[Dict[str, str]], options: Dict[str, Any]) -> Dict[str, Any]:
    body: Dict[str, Any] = {"model": cfg.model, "messages": messages, **options}
    if cfg.response_format:
        body["response_format"] = {"type": cfg.response_format}
    return body


def _headers(cfg: LlmRoute) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    api_key = os.getenv(cfg.api_key_env) if cfg.api_key_env else None
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _send(cfg: LlmRoute, body: Dict[str, Any], client: Optional[HttpClient]) -> Any:  # POST and decode, raising on non-2xx
    url = f"{cfg.base_url.rstrip('/')}{cfg.endpoint}"
    headers = _headers(cfg)
    try:
        if client is not None:
            return _decode(cfg, client.post(url, json=body, headers=headers, timeout=cfg.timeout_s))
        with httpx.Client(timeout=cfg.timeout_s) as http:
            return _decode(cfg, http.post(url, json=body, headers=headers))
    except (httpx.HTTPError, OSError) as exc:
        logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError(f"Transport to route '{cfg.name}' failed") from exc


def _decode(cfg: LlmRoute, response: HttpResponse) -> Any:
    if response.status_code >= 400:
        if is_model_unsupported(response):
            logger.warning("LLM model unsupported route=%s model=%s", cfg.name, cfg.model)
            raise LlmModelUnsupported(cfg.name, cfg.model)
        logger.error("LLM route=%s returned status %s", cfg.name, response.status_code)
        raise LlmGatewayError(f"Route '{cfg.name}' returned status {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        logger.error("LLM route=%s replied with a non-JSON body", cfg.name)
        raise LlmGatewayError(f"Route '{cfg.name}' payload was not JSON") from exc


def is_model_unsupported(response: HttpResponse) -> bool:  # 404, or 400/422 naming the model as the problem
    if response.status_code == 404:
        return True
    if response.status_code not in (400, 422):
        return False
    lowered = (response.text or "").lower()
    return any(marker in lowered for marker in UNSUPPORTED_MARKERS)


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
    normalized: List[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _first_user_line(messages: Sequence[Dict[str, str]]) -> str:
    for message in messages:
        text = message.get("content", "").strip()
        if message.get("role") != "system" and text:
            return text.splitlines()[0]
    return ""


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _extract_content(data: Any) -> str:  # choices[0].message.content, or a bare {"content": ...}
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return message["content"]
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmOutputInvalid("LLM response missing content")


def _strip_code_fences(content: str) -> str:  # Drop a surrounding ```json ... ``` block
    text = content.strip()
    if not text.startswith("```"):
        return text
    lines = text.splitlines()[1:]
    while lines and not lines[-1].strip():
        lines.pop()
    if lines and lines[-1].strip() == "```":
        lines.pop()
    return "\n".join(lines).strip()


def _retry_hint(error_text: Optional[str], enforce_json: bool) -> str:
    hint = "The previous reply failed validation."
    if error_text:
        hint += f" Reason: {_clip(error_text.splitlines()[0].strip(), 200)}."
    if enforce_json:
        return hint + " Return a single JSON object that matches the schema."
    return hint + " Follow the requested format precisely."


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
