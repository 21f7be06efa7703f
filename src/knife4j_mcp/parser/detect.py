"""OpenAPI version detection and local document loading."""

import json
from pathlib import Path
from typing import Any

import yaml


def detect_version(doc: Any) -> str:
    """Detect which OpenAPI dialect a parsed document uses.

    Returns: 'openapi3', 'swagger2', or 'unknown'.
    """
    if not isinstance(doc, dict):
        return "unknown"
    if str(doc.get("openapi", "")).startswith("3"):
        return "openapi3"
    if str(doc.get("swagger", "")).startswith("2"):
        return "swagger2"
    return "unknown"


def load_document(file_path: Path) -> Any:
    """Load a local OpenAPI document (JSON, or YAML as a superset of it)."""
    text = file_path.read_text(encoding="utf-8")

    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        pass

    # Not strict JSON: YAML accepts hand-edited exports
    return yaml.safe_load(text)
