"""Document store: fetched sources, their Markdown and module index."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from pydantic import BaseModel

from knife4j_mcp.parser.base import Api, ApiQuery, Module, ParsedDoc
from knife4j_mcp.parser.detect import detect_version
from knife4j_mcp.parser.markdown import extract_modules
from knife4j_mcp.parser.tolerant import convert_to_markdown

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, url: str) -> Any: ...


class ModuleMatch(BaseModel):
    doc: ParsedDoc
    module: Module
    name: str = ""  # the query name that found this module


class ApiMatch(BaseModel):
    doc: ParsedDoc
    module: Module
    api: Api
    query: ApiQuery | None = None


class ModuleLookup(BaseModel):
    found: list[ModuleMatch] = []
    not_found: list[str] = []


class ApiLookup(BaseModel):
    found: list[ApiMatch] = []
    not_found: list[ApiQuery] = []


class DocumentStore:
    """Holds one ParsedDoc per configured source URL.

    Sources are loaded lazily by ``ensure_initialized``; concurrent callers
    share a single in-flight load. After loading, the document list is never
    mutated and all lookups are read-only.
    """

    def __init__(
        self,
        urls: Sequence[str],
        fetcher: Fetcher,
        converter: Callable[..., str] = convert_to_markdown,
        lang: str = "zhCN",
    ):
        self.urls = list(urls)
        self.fetcher = fetcher
        self.converter = converter
        self.lang = lang
        self.docs: list[ParsedDoc] = []
        self._initialized = False
        self._init_task: asyncio.Task | None = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def ensure_initialized(self) -> None:
        """Load every source once; concurrent callers await the same load.

        A failed load is not cached: the error reaches every waiter and the
        next call starts over.
        """
        if self._initialized:
            return
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._load_docs())
        task = self._init_task
        try:
            await asyncio.shield(task)
        finally:
            if self._init_task is task and task.done():
                self._init_task = None

    async def _load_docs(self) -> None:
        docs = []
        try:
            for url in self.urls:
                content = await self.fetcher.fetch(url)
                if detect_version(content) == "unknown":
                    logger.warning("Source %s does not declare an OpenAPI/Swagger version", url)
                markdown = self.converter(content, lang=self.lang)
                modules = extract_modules(markdown)
                logger.info("Loaded %s: %d modules, %d APIs", url, len(modules), sum(len(m.apis) for m in modules))
                docs.append(ParsedDoc(url=url, markdown=markdown, modules=modules))
        except Exception:
            logger.exception("Failed to initialize docs")
            raise
        self.docs = docs
        self._initialized = True

    def get_all_modules(self) -> list[Module]:
        return [module for doc in self.docs for module in doc.modules]

    def find_module(self, module_name: str) -> ModuleMatch | None:
        """First module named exactly ``module_name``, scanning docs in order."""
        for doc in self.docs:
            for module in doc.modules:
                if module.name == module_name:
                    return ModuleMatch(doc=doc, module=module, name=module_name)
        return None

    def find_api(self, module_name: str, api_name: str) -> ApiMatch | None:
        result = self.find_module(module_name)
        if result is None:
            return None
        for api in result.module.apis:
            if api.name == api_name:
                return ApiMatch(
                    doc=result.doc,
                    module=result.module,
                    api=api,
                    query=ApiQuery(module_name=module_name, api_name=api_name),
                )
        return None

    def find_modules(self, module_names: Sequence[str]) -> ModuleLookup:
        lookup = ModuleLookup()
        for name in module_names:
            result = self.find_module(name)
            if result is None:
                lookup.not_found.append(name)
            else:
                lookup.found.append(result)
        return lookup

    def find_apis(self, queries: Sequence[ApiQuery]) -> ApiLookup:
        lookup = ApiLookup()
        for query in queries:
            result = self.find_api(query.module_name, query.api_name)
            if result is None:
                lookup.not_found.append(query)
            else:
                lookup.found.append(result)
        return lookup
