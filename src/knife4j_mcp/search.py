"""API search across all loaded documents.

Queries of the form ``Module::API`` or ``METHOD /path`` are matched exactly.
Anything else, or a direct query without hits, falls back to weighted fuzzy
ranking over the api, path, module and method fields.
"""

import math
import re
from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel

from knife4j_mcp.parser.section import get_api_details
from knife4j_mcp.store import DocumentStore

Mode = Literal["auto", "summary", "full"]
MODES = ("auto", "summary", "full")

DEFAULT_LIMIT = 10
MAX_LIMIT = 50

# (field, weight); weights sum to 1
SEARCH_KEYS = (("api", 0.5), ("path", 0.3), ("module", 0.15), ("method", 0.05))
THRESHOLD = 0.38  # 0 is a perfect match, 1 matches anything
EPSILON = 2.220446049250313e-16
MIN_PARTIAL_SCORE = 0.001

METHOD_PATH = re.compile(r"^([A-Z]+)\s+(/\S+)")


class SearchItem(BaseModel):
    module: str
    api: str
    method: str
    path: str


class SearchResult(BaseModel):
    item: SearchItem
    score: float
    index: int


class QueryResult(BaseModel):
    query: str
    items: list[SearchItem] = []
    full: bool = False
    detail: str | None = None  # Markdown of items[0] when shown in full


class FuzzySearcher:
    """Weighted approximate matching over SearchItem fields.

    Each field is scored by the edit distance between the query and its best
    matching substring, divided by the query length, so where the match sits
    inside the field does not matter. Only a field equal to the query scores
    zero; every other hit is floored at MIN_PARTIAL_SCORE. Fields scoring
    above the threshold are ignored; an item matches if any field does.
    Field scores combine as ``score ** (weight * norm)``, with ``norm``
    shrinking for fields with many words. Ties keep candidate order.
    """

    def __init__(self, items: Sequence[SearchItem], keys=SEARCH_KEYS, threshold: float = THRESHOLD):
        self.items = list(items)
        self.keys = keys
        self.threshold = threshold

    def search(self, query: str) -> list[SearchResult]:
        pattern = query.lower()
        if not pattern:
            return []

        results = []
        for index, item in enumerate(self.items):
            total = 1.0
            matched = False
            for field, weight in self.keys:
                text = str(getattr(item, field)).lower()
                score = _field_score(pattern, text)
                if score > self.threshold:
                    continue
                matched = True
                total *= (score or EPSILON) ** (weight * _field_norm(text))
            if matched:
                results.append(SearchResult(item=item, score=total, index=index))

        results.sort(key=lambda r: (r.score, r.index))
        return results


def _field_score(pattern: str, text: str) -> float:
    if pattern == text:
        return 0.0
    # exact fields score 0, any other hit at least MIN_PARTIAL_SCORE
    return max(MIN_PARTIAL_SCORE, substring_distance(pattern, text) / len(pattern))


def substring_distance(pattern: str, text: str) -> int:
    """Smallest edit distance between ``pattern`` and any substring of ``text``."""
    previous = [0] * (len(text) + 1)
    for i, p in enumerate(pattern, 1):
        current = [i] + [0] * len(text)
        for j, t in enumerate(text, 1):
            current[j] = min(
                previous[j - 1] + (p != t),
                previous[j] + 1,
                current[j - 1] + 1,
            )
        previous = current
    return min(previous)


def _field_norm(text: str) -> float:
    tokens = len(text.split()) or 1
    return round(1 / math.sqrt(tokens), 3)


def collect_items(store: DocumentStore) -> list[SearchItem]:
    """Flatten every API of every module, in document order."""
    return [
        SearchItem(module=module.name, api=api.name, method=api.method, path=api.path)
        for module in store.get_all_modules()
        for api in module.apis
    ]


def match_direct(query: str, items: Sequence[SearchItem]) -> list[SearchItem]:
    """Exact matches for ``Module::API`` or ``METHOD /path`` queries."""
    if "::" in query:
        module, api = (part.strip().lower() for part in query.split("::", 1))
        return [it for it in items if it.module.lower() == module and it.api.lower() == api]

    match = METHOD_PATH.match(query)
    if match:
        method, path = match.group(1).upper(), match.group(2)
        return [it for it in items if it.method.upper() == method and it.path == path]

    return []


def query_apis(store: DocumentStore, q: str, mode: Mode = "auto", limit: int | None = None) -> QueryResult:
    """Find APIs by exact pattern or fuzzy text; the store must be initialized."""
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode}")
    limit = min(max(DEFAULT_LIMIT if limit is None else limit, 1), MAX_LIMIT)
    query = q.strip()

    items = collect_items(store)
    matched = match_direct(query, items)
    if matched:
        matched = matched[:limit]
    else:
        matched = [r.item for r in FuzzySearcher(items).search(query)[:limit]]

    result = QueryResult(query=query, items=matched)
    if not matched:
        return result

    result.full = mode == "full" or (mode == "auto" and len(matched) == 1)
    if result.full:
        first = matched[0]
        found = store.find_api(first.module, first.api)
        if found is not None:
            result.detail = get_api_details(found.doc.markdown, first.module, first.api)
    return result
