"""Observers of session updates."""
from .base import LoggingNotifier, Notifier, NullNotifier
from .broadcaster import SessionBroadcaster, Subscriber

__all__ = ["LoggingNotifier", "Notifier", "NullNotifier", "SessionBroadcaster", "Subscriber"]
