"""Heading-bounded section extraction from Markdown."""

import re

from pydantic import BaseModel


class Section(BaseModel):
    """A heading block and its character span in the source text."""

    content: str
    start: int
    end: int


def extract_section(text: str, section_name: str, header_level: str) -> Section | None:
    """Return the block headed by ``<header_level> <section_name>``.

    The block runs from the start of the matching heading line up to the next
    heading of the same level, or to the end of the text. Returns None if no
    heading line matches.
    """
    heading = re.compile(
        rf"^{re.escape(header_level)} {re.escape(section_name)}[ \t]*(?:\r?\n|\r|$)",
        re.MULTILINE,
    )
    match = heading.search(text)
    if not match:
        return None

    start = match.start()
    next_heading = re.compile(rf"^{re.escape(header_level)} ", re.MULTILINE)
    following = next_heading.search(text, match.end())
    end = following.start() if following else len(text)

    return Section(content=text[start:end].strip(), start=start, end=end)


def get_api_details(markdown: str, module_name: str, api_name: str) -> str:
    """Return the full Markdown of one API, looked up module first."""
    module_section = extract_section(markdown, module_name, "##")
    if module_section is None:
        return f"Module not found: {module_name}"

    api_section = extract_section(module_section.content, api_name, "###")
    if api_section is None:
        return f"API not found in module {module_name}: {api_name}"

    return api_section.content
