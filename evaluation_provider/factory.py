from __future__ import annotations  # Provider strategy selection at startup

import logging
from pathlib import Path
from typing import Optional

from config import Settings, load_provider_config
from llm_gateway import HttpClient

from .base import EvaluationProvider
from .fallback import FallbackEvaluationProvider
from .llm import LlmEvaluationProvider

logger = logging.getLogger(__name__)


def build_provider(cfg: Settings, *, client: Optional[HttpClient] = None) -> EvaluationProvider:  # Live provider when routes are configured
    if not cfg.PROVIDER_CONFIG_PATH:
        logger.info("No provider config set; using fallback evaluation provider")
        return FallbackEvaluationProvider()
    path = Path(cfg.PROVIDER_CONFIG_PATH)
    if not path.exists():
        logger.warning("Provider config %s not found; using fallback evaluation provider", path)
        return FallbackEvaluationProvider()
    provider_config = load_provider_config(path)
    logger.info("Using live evaluation provider with candidates=%s", provider_config.candidates)
    return LlmEvaluationProvider(provider_config, client=client)
