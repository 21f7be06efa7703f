"""Exception types raised by knife4j-mcp."""


class Knife4jMcpError(Exception):
    """Base class for all knife4j-mcp errors."""


class ConfigError(Knife4jMcpError):
    """Startup configuration is missing or invalid."""


class FetchError(Knife4jMcpError):
    """A documentation source could not be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class RenderError(Knife4jMcpError):
    """The standard renderer could not turn a document into Markdown."""
