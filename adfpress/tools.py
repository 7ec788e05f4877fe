"""Confluence and Trello operations exposed as callable tools.

Each tool has a name, a description and a JSON-schema for its arguments.
``call_tool`` runs a Confluence tool against a :class:`ConfluenceClient`,
``call_trello_tool`` a Trello one against a :class:`TrelloClient`. Both wrap
the JSON response into a tool result: a list of text parts, flagged with
``isError`` when the service rejected the call.
"""

import json
from typing import Any, Callable, Dict, List, Optional

from .confluence import DEFAULT_PAGE_EXPAND, REPRESENTATIONS, ConfluenceClient, ConfluenceError
from .trello import TrelloClient, TrelloError


_REPRESENTATION_PROPERTY = {
    "type": "string",
    "enum": list(REPRESENTATIONS),
    "description": "Body format: ADF for the new editor, or storage XHTML",
    "default": "atlas_doc_format",
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "get_confluence_page",
        "description": "Fetch a Confluence page by ID with full content",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {"type": "string", "description": "The ID of the Confluence page to fetch"},
                "expand": {
                    "type": "string",
                    "description": "Comma-separated list of properties to expand (e.g., 'body.storage,version,space')",
                    "default": DEFAULT_PAGE_EXPAND,
                },
            },
            "required": ["pageId"],
        },
    },
    {
        "name": "search_confluence",
        "description": "Search for Confluence pages by CQL (Confluence Query Language)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "cql": {"type": "string", "description": "CQL query (e.g., 'space=EAV AND type=page')"},
                "limit": {"type": "number", "description": "Maximum number of results to return", "default": 10},
            },
            "required": ["cql"],
        },
    },
    {
        "name": "get_page_by_space_and_title",
        "description": "Get a Confluence page by space key and title",
        "inputSchema": {
            "type": "object",
            "properties": {
                "spaceKey": {"type": "string", "description": "The space key (e.g., 'EAV')"},
                "title": {"type": "string", "description": "The page title"},
            },
            "required": ["spaceKey", "title"],
        },
    },
    {
        "name": "create_confluence_page",
        "description": "Create a new Confluence page from Markdown (ADF body for the new editor by default)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "spaceKey": {"type": "string", "description": "The space key where to create the page (e.g., 'EAV')"},
                "title": {"type": "string", "description": "The title of the new page"},
                "content": {"type": "string", "description": "The page content in Markdown format"},
                "parentId": {"type": "string", "description": "Optional parent page ID"},
                "representation": _REPRESENTATION_PROPERTY,
            },
            "required": ["spaceKey", "title", "content"],
        },
    },
    {
        "name": "update_confluence_page",
        "description": "Update an existing Confluence page with Markdown content (ADF body by default)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {"type": "string", "description": "The ID of the page to update"},
                "title": {"type": "string", "description": "New title (optional, keep current if not provided)"},
                "content": {"type": "string", "description": "New content in Markdown format"},
                "representation": _REPRESENTATION_PROPERTY,
            },
            "required": ["pageId", "content"],
        },
    },
]

_SCHEMAS = {tool["name"]: tool["inputSchema"] for tool in TOOLS}


def _get_page(client: ConfluenceClient, args: Dict[str, Any]) -> Any:
    return client.get_page(args["pageId"], expand=args.get("expand") or DEFAULT_PAGE_EXPAND)


def _search(client: ConfluenceClient, args: Dict[str, Any]) -> Any:
    limit = args.get("limit")
    return client.search(args["cql"], limit=10 if limit is None else int(limit))


def _get_by_title(client: ConfluenceClient, args: Dict[str, Any]) -> Any:
    return client.get_page_by_space_and_title(args["spaceKey"], args["title"])


def _create_page(client: ConfluenceClient, args: Dict[str, Any]) -> Any:
    return client.create_page(
        args["spaceKey"],
        args["title"],
        args["content"],
        parent_id=args.get("parentId"),
        representation=args.get("representation") or "atlas_doc_format",
    )


def _update_page(client: ConfluenceClient, args: Dict[str, Any]) -> Any:
    return client.update_page(
        args["pageId"],
        args["content"],
        title=args.get("title"),
        representation=args.get("representation") or "atlas_doc_format",
    )


_HANDLERS: Dict[str, Callable[[ConfluenceClient, Dict[str, Any]], Any]] = {
    "get_confluence_page": _get_page,
    "search_confluence": _search,
    "get_page_by_space_and_title": _get_by_title,
    "create_confluence_page": _create_page,
    "update_confluence_page": _update_page,
}


TRELLO_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "get_card",
        "description": "Get details of a Trello card by ID, URL, or search query",
        "inputSchema": {
            "type": "object",
            "properties": {
                "identifier": {"type": "string", "description": "Card ID, card URL, or search keywords to find the card"},
            },
            "required": ["identifier"],
        },
    },
    {
        "name": "update_card",
        "description": "Update a Trello card description and/or name",
        "inputSchema": {
            "type": "object",
            "properties": {
                "cardId": {"type": "string", "description": "The ID of the card to update"},
                "name": {"type": "string", "description": "New name for the card (optional)"},
                "desc": {"type": "string", "description": "New description for the card (optional)"},
            },
            "required": ["cardId"],
        },
    },
    {
        "name": "move_card",
        "description": "Move a card to a different list",
        "inputSchema": {
            "type": "object",
            "properties": {
                "cardId": {"type": "string", "description": "The ID of the card to move"},
                "listId": {"type": "string", "description": "The ID of the destination list"},
            },
            "required": ["cardId", "listId"],
        },
    },
    {
        "name": "get_lists",
        "description": "Get all lists from a Trello board",
        "inputSchema": {
            "type": "object",
            "properties": {"boardId": {"type": "string", "description": "The ID of the board"}},
            "required": ["boardId"],
        },
    },
    {
        "name": "get_boards",
        "description": "Get all boards for the authenticated user",
        "inputSchema": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "search_cards",
        "description": "Search for cards across all boards",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query (card name, description, or keywords)"},
                "boardId": {"type": "string", "description": "Optional: Filter by specific board ID"},
            },
            "required": ["query"],
        },
    },
    {
        "name": "add_comment",
        "description": "Add a comment to a Trello card",
        "inputSchema": {
            "type": "object",
            "properties": {
                "cardId": {"type": "string", "description": "The ID of the card"},
                "text": {"type": "string", "description": "The comment text"},
            },
            "required": ["cardId", "text"],
        },
    },
]

_TRELLO_SCHEMAS = {tool["name"]: tool["inputSchema"] for tool in TRELLO_TOOLS}

_TRELLO_HANDLERS: Dict[str, Callable[[TrelloClient, Dict[str, Any]], Any]] = {
    "get_card": lambda client, args: client.get_card(args["identifier"]),
    "update_card": lambda client, args: client.update_card(args["cardId"], name=args.get("name"), desc=args.get("desc")),
    "move_card": lambda client, args: client.move_card(args["cardId"], args["listId"]),
    "get_lists": lambda client, args: client.get_lists(args["boardId"]),
    "get_boards": lambda client, args: client.get_boards(),
    "search_cards": lambda client, args: client.search_cards(args["query"], board_id=args.get("boardId")),
    "add_comment": lambda client, args: client.add_comment(args["cardId"], args["text"]),
}


def text_result(text: str, is_error: bool = False) -> Dict[str, Any]:
    result: Dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


def _check_arguments(schemas: Dict[str, Dict[str, Any]], name: str, args: Dict[str, Any]) -> None:
    missing = [key for key in schemas[name]["required"] if args.get(key) is None]
    if missing:
        raise ValueError(f"Missing required argument(s) for {name}: {', '.join(missing)}")


def _api_error(service: str, exc: Any) -> Dict[str, Any]:
    if exc.status_code is None:
        return text_result(f"{service} API Error: {exc}", is_error=True)
    return text_result(f"{service} API Error: {exc.status_code} - {json.dumps(exc.body)}", is_error=True)


def call_tool(client: ConfluenceClient, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Run the named Confluence tool and wrap its response.

    Args:
        client: Client used for the underlying REST call.
        name: One of the names in :data:`TOOLS`.
        arguments: Tool arguments, keyed as in the tool's input schema.

    Returns:
        A tool result dict. Confluence errors are reported in-band with
        ``isError`` set; anything else propagates.

    Raises:
        ValueError: Unknown tool, or a required argument is missing.
    """
    handler = _HANDLERS.get(name)
    if handler is None:
        raise ValueError(f"Unknown tool: {name}")

    args = arguments or {}
    _check_arguments(_SCHEMAS, name, args)

    try:
        data = handler(client, args)
    except ConfluenceError as exc:
        return _api_error("Confluence", exc)
    return text_result(json.dumps(data, indent=2))


def call_trello_tool(client: TrelloClient, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Trello counterpart of :func:`call_tool`, for the names in :data:`TRELLO_TOOLS`."""
    handler = _TRELLO_HANDLERS.get(name)
    if handler is None:
        raise ValueError(f"Unknown tool: {name}")

    args = arguments or {}
    _check_arguments(_TRELLO_SCHEMAS, name, args)

    try:
        data = handler(client, args)
    except TrelloError as exc:
        return _api_error("Trello", exc)
    return text_result(json.dumps(data, indent=2))
