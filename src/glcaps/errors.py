"""Exceptions raised by the capability catalog engine."""

from typing import Optional


class GLCapsError(Exception):
    """Base exception for glcaps errors."""


class MalformedCatalog(GLCapsError):
    """Raised when the capability catalog document is structurally invalid."""

    def __init__(self, message: str, element: Optional[str] = None) -> None:
        self.element = element
        if element:
            message = f"{message} (in {element})"
        super().__init__(message)


class MalformedReport(GLCapsError):
    """Raised when a report document cannot be deserialized."""


class ReportSerializationError(GLCapsError):
    """Raised when a report cannot be written without losing entries."""


class CapabilityQueryFailed(GLCapsError):
    """Raised by a value provider when a single capability query fails.

    The query executor catches it and records the typed fallback value.
    """


class RemoteUnavailable(GLCapsError):
    """Raised when the remote report database cannot be reached."""
