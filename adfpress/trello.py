"""Client for the Trello REST API (v1).

Every request carries the ``key`` and ``token`` query parameters. Cards can
be addressed by short id, long id, card URL, or failing those a free text
search whose first hit wins.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import httpx

if TYPE_CHECKING:
    from .config import TrelloSettings

logger = logging.getLogger(__name__)

TRELLO_API_BASE = "https://api.trello.com/1"

_SHORT_ID_RE = re.compile(r"^[a-zA-Z0-9]{8}$")
_LONG_ID_RE = re.compile(r"^[a-fA-F0-9]{24}$")
_CARD_URL_RE = re.compile(r"trello\.com/c/([a-zA-Z0-9]{8})")


class TrelloError(RuntimeError):
    """Raised when Trello answers with an error, cannot be reached, or a card lookup misses."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def extract_card_id(identifier: str) -> Optional[str]:
    """Return the card id in ``identifier``, or None if it looks like a search query."""
    if _SHORT_ID_RE.match(identifier) or _LONG_ID_RE.match(identifier):
        return identifier
    match = _CARD_URL_RE.search(identifier)
    if match:
        return match.group(1)
    return None


class TrelloClient:
    """Synchronous Trello client authenticated with an API key and token."""

    def __init__(
        self,
        api_key: str,
        token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=TRELLO_API_BASE,
            params={"key": api_key, "token": token},
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: TrelloSettings, transport: Optional[httpx.BaseTransport] = None) -> TrelloClient:
        return cls(settings.api_key, settings.token, timeout=settings.timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> TrelloClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug("Trello %s %s", method, path)
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise TrelloError(f"Failed to reach Trello: {exc}") from exc
        if not resp.is_success:
            try:
                body = resp.json()
            except ValueError:
                body = resp.text
            logger.warning("Trello %s %s failed with HTTP %s", method, path, resp.status_code)
            raise TrelloError(
                f"HTTP {resp.status_code} for {method} {path}",
                status_code=resp.status_code,
                body=body,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise TrelloError(
                f"Non-JSON response for {method} {path}",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------
    def get_card(self, identifier: str) -> Dict[str, Any]:
        """Fetch a card by id or URL, or the first card matching a search.

        Raises:
            TrelloError: The search found nothing, or the API call failed.
        """
        card_id = extract_card_id(identifier)
        if card_id:
            return self._request("GET", f"/cards/{card_id}")

        cards = self.search_cards(identifier)
        if not cards:
            raise TrelloError(f"No card found matching: {identifier}")
        return cards[0]

    def search_cards(self, query: str, board_id: Optional[str] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"query": query, "modelTypes": "cards", "card_fields": "all"}
        if board_id:
            params["idBoards"] = board_id
        data = self._request("GET", "/search", params=params)
        return data.get("cards") or []

    def update_card(self, card_id: str, name: Optional[str] = None, desc: Optional[str] = None) -> Dict[str, Any]:
        """Change a card's name and/or description; omitted fields are left alone."""
        updates = {key: value for key, value in (("name", name), ("desc", desc)) if value is not None}
        data = self._request("PUT", f"/cards/{card_id}", json=updates)
        logger.info("Updated Trello card %s (%s)", card_id, ", ".join(updates) or "no fields")
        return data

    def move_card(self, card_id: str, list_id: str) -> Dict[str, Any]:
        data = self._request("PUT", f"/cards/{card_id}", json={"idList": list_id})
        logger.info("Moved Trello card %s to list %s", card_id, list_id)
        return data

    def add_comment(self, card_id: str, text: str) -> Dict[str, Any]:
        return self._request("POST", f"/cards/{card_id}/actions/comments", json={"text": text})

    def create_card(
        self,
        list_id: str,
        name: str,
        desc: Optional[str] = None,
        pos: str = "top",
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"idList": list_id, "name": name, "pos": pos}
        if desc:
            payload["desc"] = desc
        data = self._request("POST", "/cards", json=payload)
        logger.info("Created Trello card %s in list %s", data.get("id"), list_id)
        return data

    # ------------------------------------------------------------------
    # Boards and lists
    # ------------------------------------------------------------------
    def get_lists(self, board_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/boards/{board_id}/lists")

    def get_boards(self) -> List[Dict[str, Any]]:
        """Boards of the authenticated member, closed ones left out."""
        boards = self._request("GET", "/members/me/boards")
        return [board for board in boards if not board.get("closed")]
