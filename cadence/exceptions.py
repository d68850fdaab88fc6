"""
cadence.exceptions - Custom exception classes.

All Cadence-specific exceptions inherit from CadenceError.
"""


class CadenceError(Exception):
    """Base exception for all Cadence errors."""

    pass


class ConfigError(CadenceError):
    """Configuration loading or validation error."""

    pass


class TranscriptionError(CadenceError):
    """Transcription provider error."""

    pass


class AnalysisError(CadenceError):
    """Audio metering or delivery analysis error."""

    pass


class ValidationError(CadenceError):
    """Input data validation error."""

    pass


class DependencyError(CadenceError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
