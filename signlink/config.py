"""
Engine configuration.

Loaded from a JSON file and validated against the packaged schema
``signlink.config.v0.1.json``. Every key except ``schema_version`` is
optional; defaults reproduce the bare engine (any scheme, symbolic error
identifiers, stdout launcher).

Example:
    {
      "schema_version": "0.1",
      "schemes": ["trust"],
      "error_format": "numeric",
      "log_level": "INFO",
      "launcher": {"kind": "http", "timeout_s": 10}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from signlink.errors import ConfigError, ErrorFormat
from signlink.launcher import URLLauncher, create_launcher
from signlink.schema import CONFIG_SCHEMA, load_schema, validate


@dataclass(frozen=True)
class EngineConfig:
    schema_version: str = "0.1"
    schemes: frozenset[str] | None = None
    error_format: ErrorFormat = ErrorFormat.SYMBOLIC
    log_level: str = "WARNING"
    launcher_kind: str = "stdout"
    launcher_options: dict[str, Any] = field(default_factory=dict)

    def build_launcher(self) -> URLLauncher:
        return create_launcher(self.launcher_kind, **self.launcher_options)


def config_from_dict(raw: dict[str, Any]) -> EngineConfig:
    """Validate and convert a decoded config document.

    Raises:
        jsonschema.ValidationError: If raw does not match the schema.
    """
    validate(raw, load_schema(CONFIG_SCHEMA))

    schemes = raw.get("schemes")
    launcher = dict(raw.get("launcher") or {})
    kind = str(launcher.pop("kind", "stdout"))

    return EngineConfig(
        schema_version=str(raw["schema_version"]),
        schemes=frozenset(s.lower() for s in schemes) if schemes else None,
        error_format=ErrorFormat(raw.get("error_format", ErrorFormat.SYMBOLIC)),
        log_level=str(raw.get("log_level", "WARNING")),
        launcher_kind=kind,
        launcher_options=_launcher_options(kind, launcher),
    )


def load_config(path: Path) -> EngineConfig:
    """Read, validate and convert a config file.

    Raises:
        ConfigError: If the file cannot be read or is not a JSON object.
        jsonschema.ValidationError: If the document does not match the schema.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"config {path} is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"config {path} must be a JSON object")
    return config_from_dict(raw)


def _launcher_options(kind: str, options: dict[str, Any]) -> dict[str, Any]:
    # Keep only the options the chosen launcher understands.
    if kind == "http":
        allowed = {"timeout_s", "headers"}
    elif kind == "stdout":
        allowed = {"prefix", "include_timestamp", "json_output"}
    else:
        allowed = set()
    return {k: v for k, v in options.items() if k in allowed}
