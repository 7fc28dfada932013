"""
Exception hierarchy for TransGate.

Provides specific exception types so callers can tell recoverable provider
trouble apart from request and configuration problems.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List


class TransGateError(Exception):
    """Base exception for all TransGate errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
        suggestion: Optional[str] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            details: Additional error details
            recoverable: Whether the gateway can recover from the error locally
            suggestion: Suggested fix or workaround
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "suggestion": self.suggestion
        }

    def __str__(self) -> str:
        result = self.message
        if self.suggestion:
            result += f"\nSuggestion: {self.suggestion}"
        return result


class InputValidationError(TransGateError):
    """Raised when an inbound request is malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            details={"field": field},
            recoverable=False,
            suggestion="Send a non-empty 'texts' array of strings"
        )
        self.field = field


class ConfigurationError(TransGateError):
    """Raised when configuration is invalid or incomplete."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        invalid_value: Optional[Any] = None,
        valid_values: Optional[List[Any]] = None
    ):
        """
        Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that's invalid
            invalid_value: Invalid value provided
            valid_values: List of valid values
        """
        details = {
            "config_key": config_key,
            "invalid_value": invalid_value,
            "valid_values": valid_values
        }

        suggestion = None
        if config_key and valid_values:
            suggestion = f"Valid values for {config_key}: {', '.join(map(str, valid_values))}"
        elif config_key:
            suggestion = f"Check configuration for '{config_key}'"

        super().__init__(message, details, recoverable=False, suggestion=suggestion)
        self.config_key = config_key
        self.invalid_value = invalid_value
        self.valid_values = valid_values


class ProviderError(TransGateError):
    """Raised when the upstream translation provider fails."""

    def __init__(
        self,
        provider: str,
        message: str,
        original_error: Optional[Exception] = None,
        status_code: Optional[int] = None
    ):
        """
        Initialize provider error.

        Args:
            provider: Provider/backend name
            message: Error message
            original_error: Original exception if any
            status_code: HTTP status returned by the provider, if known
        """
        full_message = f"Provider '{provider}' failed: {message}"
        details = {
            "provider": provider,
            "original_error": str(original_error) if original_error else None,
            "status_code": status_code
        }
        super().__init__(
            full_message,
            details,
            recoverable=True,
            suggestion="Original texts are returned until the provider recovers"
        )
        self.provider = provider
        self.original_error = original_error
        self.status_code = status_code


class ResponseParseError(TransGateError):
    """Raised when a provider response carries no usable translations payload."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(
            message,
            details={"raw": raw[:500] if raw else raw},
            recoverable=True
        )
        self.raw = raw


class CacheError(TransGateError):
    """Raised when cache operations fail."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        operation: Optional[str] = None
    ):
        """
        Initialize cache error.

        Args:
            message: Error message
            path: Backing file of the cache
            operation: Operation that failed (load/flush)
        """
        details = {
            "path": path,
            "operation": operation
        }
        suggestion = (
            "Cache errors are non-fatal. The gateway keeps serving from memory.\n"
            "To fix: Check disk space and permissions for the cache file."
        )

        super().__init__(message, details, recoverable=True, suggestion=suggestion)
        self.path = path
        self.operation = operation
