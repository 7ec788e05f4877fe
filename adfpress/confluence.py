"""Client for the Confluence Cloud REST API (v1 content endpoints).

Authentication reuses a browser session: the raw ``Cookie`` header is sent
with every request. Page bodies are published either as ADF
(``atlas_doc_format``) produced by :func:`adfpress.convert`, or as XHTML
(``storage``) produced by :func:`adfpress.storage.to_storage`.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

from .converter import convert
from .storage import to_storage

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

DEFAULT_PAGE_EXPAND = "body.storage,body.atlas_doc_format,version,space,ancestors"
SEARCH_EXPAND = "body.storage,body.atlas_doc_format,version,space"
REPRESENTATIONS = ("atlas_doc_format", "storage")


class ConfluenceError(RuntimeError):
    """Raised when Confluence answers with an error or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def render_body(markdown: str, representation: str = "atlas_doc_format") -> Dict[str, Any]:
    """Build the ``body`` object of a content payload from markdown."""
    if representation == "atlas_doc_format":
        value = json.dumps(convert(markdown))
    elif representation == "storage":
        value = to_storage(markdown)
    else:
        raise ValueError(
            f"Unsupported representation {representation!r}; expected one of {', '.join(REPRESENTATIONS)}"
        )
    return {representation: {"value": value, "representation": representation}}


class ConfluenceClient:
    """Synchronous Confluence client bound to one site and session."""

    def __init__(
        self,
        base_url: str,
        cookies: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.Client(
            base_url=f"{self.base_url}/wiki/rest/api",
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Cookie": cookies,
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> ConfluenceClient:
        return cls(settings.url, settings.cookies, timeout=settings.timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ConfluenceClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug("Confluence %s %s", method, path)
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ConfluenceError(f"Failed to reach Confluence at {self.base_url}: {exc}") from exc
        if not resp.is_success:
            # 3xx lands here too: an expired session redirects to the login page.
            try:
                body = resp.json()
            except ValueError:
                body = resp.text
            logger.warning("Confluence %s %s failed with HTTP %s", method, path, resp.status_code)
            raise ConfluenceError(
                f"HTTP {resp.status_code} for {method} {resp.request.url}",
                status_code=resp.status_code,
                body=body,
            )
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("Confluence %s %s returned a non-JSON body", method, path)
            raise ConfluenceError(
                f"Non-JSON response for {method} {resp.request.url}",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_page(self, page_id: str, expand: str = DEFAULT_PAGE_EXPAND) -> Dict[str, Any]:
        """GET /content/{page_id}."""
        return self._request("GET", f"/content/{page_id}", params={"expand": expand})

    def search(self, cql: str, limit: int = 10) -> Dict[str, Any]:
        """GET /content/search with a CQL query, e.g. ``space=EAV AND type=page``."""
        return self._request(
            "GET",
            "/content/search",
            params={"cql": cql, "limit": limit, "expand": SEARCH_EXPAND},
        )

    def get_page_by_space_and_title(self, space_key: str, title: str) -> Dict[str, Any]:
        """GET /content filtered by space key and exact title."""
        return self._request(
            "GET",
            "/content",
            params={"spaceKey": space_key, "title": title, "expand": DEFAULT_PAGE_EXPAND},
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create_page(
        self,
        space_key: str,
        title: str,
        markdown: str,
        parent_id: Optional[str] = None,
        representation: str = "atlas_doc_format",
    ) -> Dict[str, Any]:
        """Create a page from markdown.

        Args:
            space_key: Space the page is created in.
            title: Page title.
            markdown: Page body as markdown.
            parent_id: Optional ancestor page id.
            representation: ``atlas_doc_format`` (ADF, new editor) or
                ``storage`` (XHTML).

        Returns:
            The created content object as returned by Confluence.
        """
        payload: Dict[str, Any] = {
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "body": render_body(markdown, representation),
        }
        if parent_id:
            payload["ancestors"] = [{"id": parent_id}]

        data = self._request("POST", "/content", json=payload)
        logger.info("Created Confluence page %s in space %s", data.get("id"), space_key)
        return data

    def update_page(
        self,
        page_id: str,
        markdown: str,
        title: Optional[str] = None,
        representation: str = "atlas_doc_format",
    ) -> Dict[str, Any]:
        """Replace a page body, bumping its version number.

        The current page is read first for its version; the title is kept
        unless a new one is given.
        """
        body = render_body(markdown, representation)
        current = self.get_page(page_id, expand="version")
        payload: Dict[str, Any] = {
            "version": {"number": current["version"]["number"] + 1},
            "type": "page",
            "title": title or current.get("title"),
            "body": body,
        }

        data = self._request("PUT", f"/content/{page_id}", json=payload)
        logger.info("Updated Confluence page %s to version %s", page_id, payload["version"]["number"])
        return data
