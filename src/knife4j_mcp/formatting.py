"""Tool response text: marker-delimited blocks with YAML bodies."""

import re
from typing import Any

import yaml

from knife4j_mcp.parser.base import Module
from knife4j_mcp.parser.section import get_api_details
from knife4j_mcp.search import QueryResult
from knife4j_mcp.store import ApiLookup, ModuleLookup


def dump(data: Any) -> str:
    """YAML block style, keys in insertion order, unicode kept readable."""
    return yaml.safe_dump(data, allow_unicode=True, sort_keys=False, default_flow_style=False).rstrip("\n")


def indent(text: str, prefix: str = "  ") -> str:
    return re.sub(r"^", prefix, text, flags=re.MULTILINE)


def format_module_list(modules: list[Module]) -> str:
    rows = [
        {"name": m.name, "description": m.description, "api_count": len(m.apis)}
        for m in modules
    ]
    return "\n".join(["[docs list start]", dump(rows), "[docs list end]"])


def format_module_apis(lookup: ModuleLookup) -> str:
    lines = ["[multi-module apis start]"]
    for match in lookup.found:
        lines.append(f"{match.name}:")
        lines.append(indent(dump([api.model_dump() for api in match.module.apis])))

    if lookup.not_found:
        lines.append("[not found modules]:")
        lines.append(indent(dump(lookup.not_found)))

    lines.append("[multi-module apis end]")
    return "\n".join(lines)


def format_api_details(lookup: ApiLookup) -> str:
    lines = ["[multi-api details start]"]
    for match in lookup.found:
        module_name, api_name = match.query.module_name, match.query.api_name
        lines.append(f"{module_name}::{api_name}:")
        lines.append(indent(get_api_details(match.doc.markdown, module_name, api_name)))
        lines.append("")

    if lookup.not_found:
        lines.append("[not found apis]:")
        for query in lookup.not_found:
            lines.append(f"  - {query.module_name}::{query.api_name}")

    lines.append("[multi-api details end]")
    return "\n".join(lines)


def format_query_result(result: QueryResult) -> str:
    lines = ["[api query start]"]

    if not result.items:
        lines.append("no results")
    elif not result.full:
        lines.append("matches:")
        rows = [
            {
                "module": it.module,
                "api": it.api,
                "method": it.method,
                "path": it.path,
                "show_api_args": {"module_name": it.module, "api_name": it.api},
            }
            for it in result.items
        ]
        lines.append(indent(dump(rows)))
    else:
        first = result.items[0]
        if result.detail is None:
            lines.append(f"not found at render time: {first.module}::{first.api}")
        else:
            lines.append(f"{first.module}::{first.api}:")
            lines.append(indent(result.detail))

    lines.append("[api query end]")
    return "\n".join(lines)
