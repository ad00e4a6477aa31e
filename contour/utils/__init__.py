"""
Utility modules for configuration, logging, and error handling.
"""

from contour.utils.errors import (
    ContourError,
    DecodeError,
    UnsupportedFormatError,
    FileTooLargeError,
    NoSourceLoadedError,
    AnalysisError,
    ConfigurationError,
)
from contour.utils.logging import get_logger, setup_logging, JSONFormatter
from contour.utils.config import ConfigManager, load_config, get_default_config

__all__ = [
    "ContourError",
    "DecodeError",
    "UnsupportedFormatError",
    "FileTooLargeError",
    "NoSourceLoadedError",
    "AnalysisError",
    "ConfigurationError",
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
    "get_default_config",
]
