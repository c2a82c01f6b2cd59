from __future__ import annotations


class NovaError(Exception):
    """Base error rendered to callers as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(NovaError):
    """A credential the service cannot run without is missing."""


class UpstreamHTTPError(NovaError):
    """The chat-completion or image-generation call did not succeed."""


class SearchAugmentationError(NovaError):
    """The optional web-search call failed; never surfaced to the caller."""

    status_code = 502


class AttachmentTooLargeError(NovaError):
    status_code = 413
