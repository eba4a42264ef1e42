"""Outbound failure notifications."""

from revcord.notify.webhook import DEFAULT_RETRY, FailureNotifier, format_notification

__all__ = ["DEFAULT_RETRY", "FailureNotifier", "format_notification"]
