"""adfpress - convert Markdown to Atlassian Document Format and publish it to Confluence."""

from .converter import convert, parse

__all__ = ["convert", "parse"]
__version__ = "0.1.0"
