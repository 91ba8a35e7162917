"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to every driver setting
- Falls back to defaults when the config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- The driver section is passed explicitly into every use case; nothing
  reads configuration from module globals
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)

# Polling must stay at least this many intervals long, which bounds the
# number of confirmation fetches per delete call.
MIN_POLL_INTERVALS = 10


@dataclass(frozen=True)
class DriverSection:
    """Namespace, provider identity and delete confirmation timing."""
    namespace: str = "default"
    provider_name: str = "onmetal"
    poll_interval_seconds: float = 5.0
    poll_timeout_seconds: float = 600.0

    def __post_init__(self) -> None:
        if not self.namespace:
            raise ValueError("Driver namespace cannot be empty")
        if self.poll_interval_seconds <= 0:
            raise ValueError(
                f"poll_interval_seconds must be positive, got {self.poll_interval_seconds}"
            )
        if self.poll_timeout_seconds < MIN_POLL_INTERVALS * self.poll_interval_seconds:
            raise ValueError(
                f"poll_timeout_seconds ({self.poll_timeout_seconds}) must be at least "
                f"{MIN_POLL_INTERVALS}x poll_interval_seconds ({self.poll_interval_seconds})"
            )


@dataclass(frozen=True)
class BackendSection:
    """Which control plane to talk to and how to reach it."""
    kind: str = "kubernetes"  # "kubernetes" or "memory"
    kubeconfig: str = ""
    context: str = ""
    in_cluster: bool = False

    def __post_init__(self) -> None:
        if self.kind not in ("kubernetes", "memory"):
            raise ValueError(f"Unknown backend kind: {self.kind!r}")


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class DriverConfig:
    """Root configuration for the machine driver."""
    driver: DriverSection = field(default_factory=DriverSection)
    backend: BackendSection = field(default_factory=BackendSection)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"


def _env_override(data: dict, prefix: str = "ONMETAL") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern ONMETAL_SECTION_KEY.
    For example: ONMETAL_DRIVER_NAMESPACE=machines, ONMETAL_BACKEND_KIND=memory
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        parts = key[len(prefix) + 1:].lower().split("_", 1)
        if len(parts) == 2 and parts[0] in _SECTIONS:
            section, field_name = parts
            data.setdefault(section, {})
            data[section][field_name] = value
        else:
            data[key[len(prefix) + 1:].lower()] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Environment values arrive as strings
    for f in dataclasses.fields(cls):
        if f.name in filtered and isinstance(filtered[f.name], str):
            if f.type == "float":
                filtered[f.name] = float(filtered[f.name])
            elif f.type == "bool":
                filtered[f.name] = filtered[f.name].lower() in ("true", "1", "yes")

    return cls(**filtered)


_SECTIONS = {
    "driver": DriverSection,
    "backend": BackendSection,
    "telemetry": TelemetryConfig,
}


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "ONMETAL",
) -> DriverConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (ONMETAL_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to onmetal-driver.json in CWD.
        env_prefix: Environment variable prefix. Defaults to ONMETAL.
    """
    config_path = Path(path) if path else Path("onmetal-driver.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    return DriverConfig(
        driver=_build_sub_config(DriverSection, data.get("driver", {})),
        backend=_build_sub_config(BackendSection, data.get("backend", {})),
        telemetry=_build_sub_config(TelemetryConfig, data.get("telemetry", {})),
        log_level=str(data.get("log_level", "WARNING")).upper(),
    )
