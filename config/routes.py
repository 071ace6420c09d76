from __future__ import annotations  # Configuration schema for evaluation model routes

from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field, model_validator


class LlmRoute(BaseModel):  # LLM endpoint configuration
    name: str
    base_url: str
    endpoint: str = "/v1/chat/completions"
    model: str
    timeout_s: float = Field(default=30.0, ge=0.1)
    max_retries: int = Field(default=2, ge=0)
    api_key_env: str | None = None
    response_format: str | None = "json_object"
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    sequential: bool = False
    enforce_json: bool = True


class ProviderConfig(BaseModel):  # Ordered model candidates for the live evaluation provider
    llm_routes: Dict[str, LlmRoute]
    candidates: List[str] = Field(min_length=1)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)

    @model_validator(mode="after")
    def _check_candidates(self) -> "ProviderConfig":
        for route_id in self.candidates:
            if route_id not in self.llm_routes:
                raise ValueError(f"Route '{route_id}' missing for candidate list")
        return self

    def ordered_routes(self) -> List[LlmRoute]:  # Routes in fallback order
        return [self.llm_routes[route_id] for route_id in self.candidates]


def load_provider_config(path: Path) -> ProviderConfig:  # Load provider configuration from disk
    data = path.read_text(encoding="utf-8")
    return ProviderConfig.model_validate_json(data)
