"""Unified exception hierarchy for pixmill.

All pixmill exceptions inherit from PixMillError, enabling:
- Catching all pixmill errors with `except PixMillError`
- Error context preservation via the `context` attribute
- Causality chains via `raise ... from e` patterns
"""

from typing import Any


class PixMillError(Exception):
    """Base exception for all pixmill errors.

    Args:
        message: Human-readable error description
        context: Optional dict of contextual information (size, step, etc.)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base} [{details}]"
        return base


class ConfigError(PixMillError):
    """Raised when a pipeline configuration is invalid or cannot be loaded.

    Attributes:
        profile: Name of the profile where the error occurred (if applicable)
        transform_idx: Index of the offending transform (if applicable)
        field: Name of the offending field (if applicable)
        suggestion: Suggested fix (if applicable)
    """

    def __init__(
        self,
        message: str,
        profile: str | None = None,
        transform_idx: int | None = None,
        field: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(message)
        self.profile = profile
        self.transform_idx = transform_idx
        self.field = field
        self.suggestion = suggestion

    def __str__(self) -> str:
        parts = []
        if self.profile:
            location = f"In profile '{self.profile}'"
            if self.transform_idx is not None:
                location += f", transform #{self.transform_idx + 1}"
            if self.field:
                location += f", field '{self.field}'"
            parts.append(location)
        elif self.field:
            parts.append(f"In field '{self.field}'")
        parts.append(self.message)
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return "\n".join(parts)


class TransformError(PixMillError):
    """Raised when an operation cannot be appended to a transform spec."""


class InvalidDimensionsError(TransformError):
    """Raised for zero, negative or out-of-range sizes."""


class OutOfBoundsError(TransformError):
    """Raised when an overlay anchor lies outside the base canvas."""


class InvalidPixelBufferError(PixMillError):
    """Raised when a raw buffer's length does not match width x height x bpp."""


class DecodeError(PixMillError):
    """Raised when encoded source bytes cannot be identified or decoded."""


class CompositeError(PixMillError):
    """Raised when a pixel copy or compositing step fails."""


class EncodeError(PixMillError):
    """Raised when the output container cannot be written."""


class ProcessingError(PixMillError):
    """Raised when batch image processing fails."""
