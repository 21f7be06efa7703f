"""MCP server definition: registers the documentation tools via FastMCP."""

from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from knife4j_mcp.formatting import (
    format_api_details,
    format_module_apis,
    format_module_list,
    format_query_result,
)
from knife4j_mcp.parser.base import ApiQuery
from knife4j_mcp.search import MAX_LIMIT, Mode, query_apis
from knife4j_mcp.store import DocumentStore


LIST_MODULES_DESCRIPTION = "\n".join([
    "Discover top-level API modules and their size.",
    "Use when: you need an overview before drilling down.",
    "Avoid when: you already know module or API names (use list_apis/query_api).",
    "Returns: YAML list of {name, description, api_count} between [docs list start]/[docs list end].",
])

LIST_APIS_DESCRIPTION = "\n".join([
    "Enumerate APIs in specific modules for precise selection.",
    "Use when: you know target module names and want API options.",
    "Avoid when: exploring vaguely (use query_api).",
    "Returns: Per-module YAML under [multi-module apis start]/[multi-module apis end]; "
    "includes [not found modules] if any.",
    "Args: module_names: string[].",
])

SHOW_API_DESCRIPTION = "\n".join([
    "Render full Markdown docs for specified APIs.",
    "Use when: you already know exact module+API names.",
    "Avoid when: browsing or fuzzy finding (use query_api/list_apis).",
    "Returns: Indented Markdown per API between [multi-api details start]/[multi-api details end]; "
    "lists [not found apis] as bullets.",
    "Args: api_queries: { module_name, api_name }[].",
])

QUERY_API_DESCRIPTION = "\n".join([
    "One-shot fuzzy search across module/API/method/path; optional direct view.",
    "Use when: you are unsure of exact names and want to find then view in one step.",
    "Matching: 'Module::API', 'GET /path', or keywords with fuzziness.",
    "Modes: auto (default, full if exactly 1 match), summary (always list), full (show first match).",
    "Returns: [api query start]/[api query end] wrapped text; summary lists items with show_api_args "
    "for direct follow-up.",
    f"Args: q: string, mode?: 'auto'|'summary'|'full', limit?: number (<={MAX_LIMIT}).",
])


def create_server(store: DocumentStore, port: int = 3000) -> FastMCP:
    """Build the MCP server; every tool reads from ``store``."""
    mcp = FastMCP(
        name="knife4j-mcp",
        instructions="Browse and search OpenAPI documentation by module, API name, method or path.",
        port=port,
    )

    async def ready() -> None:
        try:
            await store.ensure_initialized()
        except Exception as e:
            raise ToolError(str(e)) from e

    @mcp.tool(name="list_modules", description=LIST_MODULES_DESCRIPTION)
    async def list_modules() -> str:
        await ready()
        return format_module_list(store.get_all_modules())

    @mcp.tool(name="list_apis", description=LIST_APIS_DESCRIPTION)
    async def list_apis(
        module_names: Annotated[list[str], Field(description="Array of module names to query")],
    ) -> str:
        await ready()
        return format_module_apis(store.find_modules(module_names))

    @mcp.tool(name="show_api", description=SHOW_API_DESCRIPTION)
    async def show_api(
        api_queries: Annotated[
            list[ApiQuery],
            Field(description="Array of API queries (module_name and api_name pairs)"),
        ],
    ) -> str:
        await ready()
        return format_api_details(store.find_apis(api_queries))

    @mcp.tool(name="query_api", description=QUERY_API_DESCRIPTION)
    async def query_api(
        q: Annotated[str, Field(description="Search query. Examples: 'User::GetInfo', 'GET /users/{id}', 'users list'")],
        mode: Annotated[
            Mode,
            Field(description="'auto' shows full text when exactly one match; 'summary' lists results; "
                              "'full' always returns first match details"),
        ] = "auto",
        limit: Annotated[int | None, Field(ge=1, le=MAX_LIMIT, description="Max number of results (default 10)")] = None,
    ) -> str:
        await ready()
        return format_query_result(query_apis(store, q, mode=mode, limit=limit))

    return mcp
