"""Data models for indexed API documentation.

The converter turns every OpenAPI source into Markdown, and the indexer
turns that Markdown into these models for lookup and search.
"""

from pydantic import BaseModel

UNKNOWN = "Unknown"  # method/path could not be recovered from the Markdown


class Api(BaseModel):
    """One documented endpoint, i.e. one ``###`` heading."""

    name: str
    path: str = UNKNOWN
    method: str = UNKNOWN
    summary: str = ""


class Module(BaseModel):
    """A named group of APIs, i.e. one ``##`` heading."""

    name: str
    description: str = ""
    apis: list[Api] = []


class ParsedDoc(BaseModel):
    """Markdown of one source together with its module index."""

    url: str
    markdown: str
    modules: list[Module] = []


class ApiQuery(BaseModel):
    """A (module, API) name pair as passed to ``show_api``."""

    module_name: str
    api_name: str
