from __future__ import annotations

import json
from importlib import resources
from typing import Any, Dict, cast

import jsonschema  # type: ignore[import-untyped]

CONFIG_SCHEMA = "signlink.config.v0.1.json"

_SCHEMAS: Dict[str, Dict[str, Any]] = {}


def load_schema(name: str) -> Dict[str, Any]:
    """Load a packaged JSON schema by file name (cached)."""
    if name not in _SCHEMAS:
        with resources.files("signlink").joinpath(f"schemas/{name}").open(
            "r", encoding="utf-8"
        ) as f:
            _SCHEMAS[name] = cast(Dict[str, Any], json.load(f))
    return _SCHEMAS[name]


def validate(instance: Dict[str, Any], schema: Dict[str, Any]) -> None:
    jsonschema.validate(instance=instance, schema=schema)
