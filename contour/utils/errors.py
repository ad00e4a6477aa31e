"""
Custom exceptions for the Contour pitch analysis package.

This module defines a hierarchy of exceptions for handling the error
conditions of decoding, segment loading and configuration.
"""

from typing import Any, Optional, Tuple


class ContourError(Exception):
    """Base exception for all pitch analysis errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class DecodeError(ContourError):
    """Raised when source audio cannot be decoded."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class UnsupportedFormatError(DecodeError):
    """Raised when the audio container or codec is not supported."""

    def __init__(self, message: str, format: Optional[str] = None):
        super().__init__(message)
        self.format = format
        self.details = {"format": format}


class FileTooLargeError(DecodeError):
    """Raised when an audio file exceeds the size limit."""

    def __init__(
        self,
        message: str,
        file_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        super().__init__(message)
        self.file_size = file_size
        self.max_size = max_size
        self.details = {"file_size": file_size, "max_size": max_size}


class NoSourceLoadedError(ContourError):
    """Raised when a load or query runs before a source was initialized."""

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot run '{operation}': no audio source loaded. Call initialize() first.",
            details={"operation": operation},
        )
        self.operation = operation


class AnalysisError(ContourError):
    """Raised when pitch estimation fails for a sample range."""

    def __init__(
        self,
        message: str,
        estimator_name: Optional[str] = None,
        sample_range: Optional[Tuple[int, int]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.estimator_name = estimator_name
        self.sample_range = sample_range
        self.original_error = original_error
        self.details = {
            "estimator": estimator_name,
            "samples": sample_range,
            "cause": repr(original_error) if original_error else None,
        }


class ConfigurationError(ContourError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
        self.details = {"config_key": config_key}
