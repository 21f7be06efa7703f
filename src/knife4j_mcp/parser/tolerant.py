"""Tolerant OpenAPI to Markdown conversion.

Conversion degrades through four layers and always returns Markdown:

1. standard  - the strict renderer on the document as fetched
2. sanitized - the same renderer on a cleaned copy of the document
3. manual    - Markdown built directly from paths/tags/info
4. fallback  - a structural summary of the top-level keys

Every layer failure is logged and carried forward so the final output can
report why the richer layers were skipped.
"""

import copy
import logging
from collections.abc import Callable
from typing import Any

from .swagger import HTTP_METHODS, render_markdown

logger = logging.getLogger(__name__)

Renderer = Callable[..., str]

# Vendor extensions (Apifox, knife4j) that carry structured values renderers choke on
PROBLEMATIC_EXTENSION_KEYS = frozenset({
    "x-apifox-folder",
    "x-apifox-status",
    "x-apifox-name",
    "x-apifox-orders",
    "x-apifox-ignore-properties",
    "x-apifox-enum",
    "x-apifox-refs",
    "x-apifox-overrides",
    "x-run-in-apifox",
    "x-order",
    "x-author",
    "x-ignoreParameters",
    "x-includeParameters",
    "x-markdownFiles",
    "x-openapi",
    "x-setting",
})

REF_PLACEHOLDER = "_"

AUTO_CLEANED_NOTICE = (
    "> **Auto-cleaned**: problematic vendor extensions and non-ASCII `$ref` "
    "characters were removed before rendering.\n\n"
)

MANUAL_NOTICE = (
    "> **Manually Parsed**: the standard renderer could not process this "
    "document; showing a simplified view built from its paths."
)

LAYERS = ("standard", "sanitized", "manual", "fallback")


def convert_to_markdown(document: Any, renderer: Renderer = render_markdown, lang: str = "zhCN") -> str:
    """Convert an OpenAPI document to Markdown. Never raises."""
    errors: dict[str, str] = {}

    try:
        markdown = renderer(document, lang=lang)
        logger.info("OpenAPI to Markdown conversion succeeded (standard)")
        return str(markdown)
    except Exception as e:
        errors["standard"] = _describe(e)
        logger.warning("Standard conversion failed: %s", errors["standard"])

    try:
        cleaned = sanitize_document(document)
        markdown = renderer(cleaned, lang=lang)
        logger.info("OpenAPI to Markdown conversion succeeded (sanitized)")
        return AUTO_CLEANED_NOTICE + str(markdown)
    except Exception as e:
        errors["sanitized"] = _describe(e)
        logger.warning("Sanitized conversion failed: %s", errors["sanitized"])

    try:
        markdown = build_manual_markdown(document)
        logger.info("OpenAPI to Markdown conversion succeeded (manual)")
        return markdown
    except Exception as e:
        errors["manual"] = _describe(e)
        logger.warning("Manual conversion failed: %s", errors["manual"])

    try:
        return build_fallback_summary(document, errors)
    except Exception as e:
        errors["fallback"] = _describe(e)
        logger.error("Fallback summary failed: %s", errors["fallback"])

    return _failure_report(errors)


def sanitize_document(document: Any) -> Any:
    """Deep-copy a document, dropping problematic extensions and fixing ``$ref``s."""
    cleaned = copy.deepcopy(document)
    _strip_extensions(cleaned)
    _fix_refs(cleaned)
    return cleaned


def _strip_extensions(node: Any) -> None:
    if isinstance(node, dict):
        for key in [k for k in node if k in PROBLEMATIC_EXTENSION_KEYS]:
            del node[key]
        for value in node.values():
            _strip_extensions(value)
    elif isinstance(node, list):
        for item in node:
            _strip_extensions(item)


def _fix_refs(node: Any) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str):
                node[key] = "".join(c if c.isascii() else REF_PLACEHOLDER for c in value)
            else:
                _fix_refs(value)
    elif isinstance(node, list):
        for item in node:
            _fix_refs(item)


def build_manual_markdown(document: Any) -> str:
    """Build Markdown straight from ``info`` and ``paths``, without a renderer."""
    info = document.get("info") or {}
    paths = document.get("paths") or {}

    lines = [f"# {info.get('title') or 'API Documentation'}", "", MANUAL_NOTICE, ""]
    if info.get("description"):
        lines += [str(info["description"]).strip(), ""]
    if info.get("version"):
        lines += [f"**Version:** {info['version']}", ""]

    groups: dict[str, list[str]] = {}
    for path, item in paths.items():
        if not isinstance(item, dict):
            continue
        for method in HTTP_METHODS:
            op = item.get(method)
            if not isinstance(op, dict):
                continue
            tags = op.get("tags") or []
            tag = str(tags[0]) if isinstance(tags, list) and tags else "Default"

            title = op.get("summary") or op.get("operationId") or f"{method.upper()} {path}"
            section = [f"### {str(title).strip()}", "", "```http", f"{method.upper()} {path}", "```", ""]
            if op.get("description"):
                section += [str(op["description"]).strip(), ""]
            groups.setdefault(tag, []).extend(section)

    for tag, section in groups.items():
        lines += [f"## {tag}", ""] + section

    schemas = _schemas(document)
    if schemas is not None:
        lines += ["## Schemas", "", f"This document defines {len(schemas)} schema(s).", ""]

    return "\n".join(lines).rstrip() + "\n"


def build_fallback_summary(document: Any, errors: dict[str, str]) -> str:
    """Describe the document's top-level structure when no layer could render it."""
    lines = [
        "# API Documentation (Fallback Summary)",
        "",
        "> Every conversion layer failed; showing the raw document structure.",
        "",
        "## Conversion Errors",
        "",
    ]
    lines += [f"- {layer}: {message}" for layer, message in errors.items()]
    lines.append("")

    if not isinstance(document, dict):
        lines += [
            "## Invalid Structure",
            "",
            f"Invalid document structure: expected a JSON object, got {_type_name(document)}.",
        ]
        return "\n".join(lines).rstrip() + "\n"

    lines += ["## Document Structure", ""]
    for key, value in document.items():
        lines.append(f"- `{key}`: {_type_name(value)}{_size(value)}")
    lines.append("")

    info = document.get("info")
    paths = document.get("paths")
    schemas = _schemas(document)
    lines += ["## Overview", ""]
    if isinstance(info, dict):
        if info.get("title"):
            lines.append(f"- Title: {info['title']}")
        if info.get("version"):
            lines.append(f"- Version: {info['version']}")
    if isinstance(paths, dict):
        lines.append(f"- Paths: {len(paths)}")
    if schemas is not None:
        lines.append(f"- Schemas: {len(schemas)}")

    return "\n".join(lines).rstrip() + "\n"


def _failure_report(errors: dict[str, str]) -> str:
    lines = ["# API Documentation (Conversion Failed)", "", "All conversion layers failed:", ""]
    for layer in LAYERS:
        lines.append(f"- {layer}: {errors.get(layer, 'unknown error')}")
    return "\n".join(lines) + "\n"


def _schemas(document: dict) -> dict | None:
    components = document.get("components")
    if isinstance(components, dict) and isinstance(components.get("schemas"), dict):
        return components["schemas"]
    if isinstance(document.get("definitions"), dict):
        return document["definitions"]
    return None


def _type_name(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return type(value).__name__


def _size(value: Any) -> str:
    if isinstance(value, dict):
        return f" ({len(value)} keys)"
    if isinstance(value, list):
        return f" ({len(value)} items)"
    return ""


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__
