"""Markdown index parser.

Builds the module/API index from converter Markdown: every ``##`` heading
starts a module and every ``###`` heading inside it starts an API.
"""

import re

from .base import UNKNOWN, Api, Module

MODULE_HEADING = re.compile(r"^## (.+?)[ \t]*(?:\r?\n|\r|$)", re.MULTILINE)
API_HEADING = re.compile(r"^### (.+?)[ \t]*(?:\r?\n|\r|$)", re.MULTILINE)
NEXT_MODULE = re.compile(r"^## ", re.MULTILINE)
NEXT_API = re.compile(r"^### ", re.MULTILINE)
HTTP_BLOCK = re.compile(r"```http\r?\n([A-Z]+) ([^\r\n]+)")
BLANK_LINE = re.compile(r"^[ \t]*(?:\r?\n|\r)")


def extract_modules(markdown: str) -> list[Module]:
    """Parse Markdown into modules and their APIs, in document order."""
    modules = []
    for match in MODULE_HEADING.finditer(markdown):
        following = NEXT_MODULE.search(markdown, match.end())
        end = following.start() if following else len(markdown)
        body = markdown[match.end():end]

        modules.append(
            Module(
                name=match.group(1).strip(),
                description=_extract_description(body),
                apis=_extract_apis(body),
            )
        )
    return modules


def _extract_description(body: str) -> str:
    """Text between the module heading's blank line and the first ``###``."""
    blank = BLANK_LINE.match(body)
    if not blank:
        return ""
    first_api = NEXT_API.search(body, blank.end())
    text = body[blank.end():first_api.start() if first_api else len(body)]
    return text.strip()


def _extract_apis(body: str) -> list[Api]:
    apis = []
    for match in API_HEADING.finditer(body):
        following = NEXT_API.search(body, match.end())
        content = body[match.end():following.start() if following else len(body)]

        name = match.group(1).strip()
        method, path = _extract_method_path(content)
        apis.append(Api(name=name, path=path, method=method, summary=name))
    return apis


def _extract_method_path(content: str) -> tuple[str, str]:
    """Read ``METHOD path`` from the first line of an ``http`` code block."""
    match = HTTP_BLOCK.search(content)
    if not match:
        return UNKNOWN, UNKNOWN
    return match.group(1).strip(), match.group(2).strip()
