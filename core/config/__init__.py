"""
Runtime Configuration Module

Provides configuration loading and management for proof verification.
"""

from .runtime import (
    LoggingConfig,
    OutputConfig,
    RuntimeConfig,
    VerifierConfig,
    get_default_config,
    get_default_config_template,
    set_default_config,
)

__all__ = [
    "RuntimeConfig",
    "VerifierConfig",
    "LoggingConfig",
    "OutputConfig",
    "get_default_config",
    "get_default_config_template",
    "set_default_config",
]
