from unittest.mock import AsyncMock

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from knife4j_mcp.errors import FetchError
from knife4j_mcp.server import create_server
from knife4j_mcp.store import DocumentStore

DOC = """## User

User endpoints

### Get User

```http
GET /users/{id}
```

Returns one user.
"""


def _store(error=None) -> DocumentStore:
    fetcher = AsyncMock()
    fetcher.fetch.side_effect = error
    fetcher.fetch.return_value = DOC
    return DocumentStore(["http://docs"], fetcher, converter=lambda content, lang="zhCN": content)


async def _call_text(server, name: str, arguments: dict) -> str:
    result = await server.call_tool(name, arguments)
    content = result[0] if isinstance(result, tuple) else result
    return content[0].text


class TestCreateServer:
    async def test_registers_tools(self):
        tools = await create_server(_store()).list_tools()
        assert {t.name for t in tools} == {"list_modules", "list_apis", "show_api", "query_api"}

    async def test_list_modules(self):
        text = await _call_text(create_server(_store()), "list_modules", {})
        assert text.startswith("[docs list start]")
        assert "api_count: 1" in text

    async def test_list_apis(self):
        text = await _call_text(create_server(_store()), "list_apis", {"module_names": ["User", "Nope"]})
        assert "User:" in text
        assert "[not found modules]:" in text

    async def test_show_api(self):
        arguments = {"api_queries": [{"module_name": "User", "api_name": "Get User"}]}
        text = await _call_text(create_server(_store()), "show_api", arguments)
        assert "User::Get User:" in text
        assert "Returns one user." in text

    async def test_query_api(self):
        text = await _call_text(create_server(_store()), "query_api", {"q": "User::Get User"})
        assert text.startswith("[api query start]\nUser::Get User:")

    async def test_initialization_failure_is_a_tool_error(self):
        server = create_server(_store(error=FetchError("http://docs", "HTTP 500")))
        with pytest.raises(ToolError, match="HTTP 500"):
            await server.call_tool("list_modules", {})
