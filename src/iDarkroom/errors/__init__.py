"""Custom exception hierarchy for iDarkroom."""

from __future__ import annotations


class IDarkroomError(Exception):
    """Base class for all custom errors raised by iDarkroom."""


# --- 3-layer hierarchy ---

class DomainError(IDarkroomError):
    """Base class for domain-level errors."""


class InfrastructureError(IDarkroomError):
    """Base class for infrastructure-level errors."""


class ApplicationError(IDarkroomError):
    """Base class for application-level errors."""


# --- Domain errors ---

class AdjustmentsValidationError(DomainError):
    """Raised when an adjustments payload fails schema validation."""


class MaskParameterMismatchError(DomainError):
    """Raised when a sub-mask's parameter variant does not match its type."""


class UnknownMaskError(DomainError):
    """Raised when an update targets a sub-mask id that does not exist."""


# --- Infrastructure errors ---

class PixelSourceError(InfrastructureError):
    """Raised when the host bridge fails to provide decoded pixels."""


class JsonDocumentError(InfrastructureError):
    """Raised when a JSON document cannot be read or parsed."""


# --- Application errors ---

class SettingsLoadError(ApplicationError):
    """Raised when the settings file cannot be read."""


class SettingsValidationError(ApplicationError):
    """Raised when the settings file does not match the schema."""
