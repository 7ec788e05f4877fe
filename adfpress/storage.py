"""Markdown → Confluence storage format (XHTML).

Confluence's legacy editor stores page bodies as XHTML. mistune's HTML
renderer gets close enough for the constructs we publish.
"""

import mistune


_html = mistune.create_markdown(plugins=["table", "strikethrough"])


def to_storage(markdown: str) -> str:
    """Render markdown as an XHTML string for the ``storage`` representation."""
    if not markdown or not markdown.strip():
        return ""
    return _html(markdown)
