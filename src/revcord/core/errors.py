"""Bridge domain exceptions."""

from __future__ import annotations


class BridgeError(Exception):
    """Base for bridge domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class BridgeConfigurationError(BridgeError):
    """Config validation or load failure."""


class NotFoundError(BridgeError):
    """Update targeted a record id that does not exist."""


class NotReadyError(BridgeError):
    """Adapter used before the platform confirmed the connection."""


class LoginFailedError(BridgeError):
    """Platform rejected the bot token or the connection could not be established."""


class InvalidChannelError(BridgeError):
    """Target channel is missing, of the wrong type, or not accessible."""


class UploadFailedError(BridgeError):
    """Attachment could not be fetched or rehosted."""
