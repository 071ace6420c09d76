"""Structured event logging, spans and admin helpers for interview sessions."""
from .logger import configure_logging, log_event
from .tracing import span

__all__ = ["configure_logging", "log_event", "span"]
