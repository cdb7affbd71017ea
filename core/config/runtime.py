"""
Runtime Configuration

Central configuration for proof verification limits, logging, and output.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "MPTPROOF_"


@dataclass
class VerifierConfig:
    """Limits applied when verifying untrusted proofs."""
    # Deepest possible path for 32-byte keys is 64 branches plus a leaf
    max_proof_nodes: Optional[int] = 128


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class OutputConfig:
    """Configuration for CLI output."""
    format: str = "human"  # "human" or "json"

    def __post_init__(self):
        if self.format not in ("human", "json"):
            raise ValueError(f"Unknown output format: {self.format}")


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (and a .env file)
    - YAML file
    - Programmatic construction
    """
    verifier: VerifierConfig = field(default_factory=VerifierConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - MPTPROOF_MAX_PROOF_NODES: Proof element limit (0 disables it)
        - MPTPROOF_LOG_LEVEL: Log level
        - MPTPROOF_LOG_FILE: Log file path
        - MPTPROOF_OUTPUT_FORMAT: "human" or "json"
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}MAX_PROOF_NODES"):
            limit = int(os.getenv(f"{ENV_PREFIX}MAX_PROOF_NODES", "0"))
            overrides.setdefault("verifier", {})["max_proof_nodes"] = limit or None

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        if os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT"):
            overrides.setdefault("output", {})["format"] = os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        verifier_data = data.get("verifier", {})
        logging_data = data.get("logging", {})
        output_data = data.get("output", {})

        verifier = VerifierConfig(**verifier_data) if verifier_data else VerifierConfig()
        logging_config = LoggingConfig(**logging_data) if logging_data else LoggingConfig()
        output = OutputConfig(**output_data) if output_data else OutputConfig()

        return cls(
            verifier=verifier,
            logging=logging_config,
            output=output,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("verifier", "logging", "output"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "verifier": {
                "max_proof_nodes": self.verifier.max_proof_nodes,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "output": {
                "format": self.output.format,
            },
            "extra": self.extra,
        }


def get_default_config_template() -> str:
    """Get a template YAML configuration file."""
    return """\
verifier:
  # Reject proofs with more elements than this (null disables the limit)
  max_proof_nodes: 128

logging:
  level: INFO
  file: null

output:
  # human or json
  format: human
"""


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
