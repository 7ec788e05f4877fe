"""Tests for the Confluence REST client."""

import json

import httpx
import pytest

from adfpress import convert
from adfpress.confluence import DEFAULT_PAGE_EXPAND, ConfluenceClient, ConfluenceError, render_body


API = "/wiki/rest/api"


def test_get_page_sends_cookie_and_expand(client, confluence):
    confluence.add("GET", f"{API}/content/123", body={"id": "123", "title": "Home"})

    data = client.get_page("123")

    assert data == {"id": "123", "title": "Home"}
    request = confluence.requests[0]
    assert request.url.host == "wiki.example.net"
    assert request.headers["Cookie"] == "JSESSIONID=abc"
    assert request.headers["Accept"] == "application/json"
    assert request.url.params["expand"] == DEFAULT_PAGE_EXPAND


def test_search_passes_cql_and_limit(client, confluence):
    confluence.add("GET", f"{API}/content/search", body={"results": [], "size": 0})

    assert client.search("space=EAV AND type=page", limit=5) == {"results": [], "size": 0}
    params = confluence.requests[0].url.params
    assert params["cql"] == "space=EAV AND type=page"
    assert params["limit"] == "5"
    assert params["expand"] == "body.storage,body.atlas_doc_format,version,space"


def test_get_page_by_space_and_title(client, confluence):
    confluence.add("GET", f"{API}/content", body={"results": [{"id": "9"}]})

    client.get_page_by_space_and_title("EAV", "Release notes")

    params = confluence.requests[0].url.params
    assert params["spaceKey"] == "EAV"
    assert params["title"] == "Release notes"


def test_create_page_publishes_adf(client, confluence):
    confluence.add("POST", f"{API}/content", body={"id": "42"})
    md = "# Notes\n\n- one\n- two"

    assert client.create_page("EAV", "Notes", md) == {"id": "42"}

    payload = confluence.json_body()
    assert payload["type"] == "page"
    assert payload["title"] == "Notes"
    assert payload["space"] == {"key": "EAV"}
    assert "ancestors" not in payload
    body = payload["body"]["atlas_doc_format"]
    assert body["representation"] == "atlas_doc_format"
    assert json.loads(body["value"]) == convert(md)


def test_create_page_with_parent_and_storage(client, confluence):
    confluence.add("POST", f"{API}/content", body={"id": "43"})

    client.create_page("EAV", "Child", "# Hi", parent_id="7", representation="storage")

    payload = confluence.json_body()
    assert payload["ancestors"] == [{"id": "7"}]
    assert payload["body"]["storage"]["representation"] == "storage"
    assert "<h1>Hi</h1>" in payload["body"]["storage"]["value"]


def test_update_page_bumps_version_and_keeps_title(client, confluence):
    confluence.add("GET", f"{API}/content/5", body={"id": "5", "title": "Old", "version": {"number": 3}})
    confluence.add("PUT", f"{API}/content/5", body={"id": "5", "version": {"number": 4}})

    client.update_page("5", "new body")

    get_request, put_request = confluence.requests
    assert get_request.url.params["expand"] == "version"
    payload = json.loads(put_request.content)
    assert payload["version"] == {"number": 4}
    assert payload["title"] == "Old"
    assert payload["type"] == "page"
    assert json.loads(payload["body"]["atlas_doc_format"]["value"]) == convert("new body")


def test_update_page_with_new_title(client, confluence):
    confluence.add("GET", f"{API}/content/5", body={"id": "5", "title": "Old", "version": {"number": 1}})
    confluence.add("PUT", f"{API}/content/5", body={"id": "5"})

    client.update_page("5", "text", title="New")

    assert confluence.json_body()["title"] == "New"


def test_http_error_raises_confluence_error(client, confluence):
    confluence.add("GET", f"{API}/content/404", status=404, body={"message": "No content found"})

    with pytest.raises(ConfluenceError) as excinfo:
        client.get_page("404")

    assert excinfo.value.status_code == 404
    assert excinfo.value.body == {"message": "No content found"}


def test_transport_error_raises_confluence_error():
    def boom(request):
        raise httpx.ConnectError("vpn down", request=request)

    with ConfluenceClient("https://wiki.example.net", "c", transport=httpx.MockTransport(boom)) as c:
        with pytest.raises(ConfluenceError) as excinfo:
            c.search("type=page")

    assert excinfo.value.status_code is None


def test_unknown_representation_sends_nothing(client, confluence):
    with pytest.raises(ValueError):
        client.create_page("EAV", "T", "body", representation="wiki")
    assert confluence.requests == []


def test_render_body_storage():
    assert render_body("plain", "storage") == {
        "storage": {"value": "<p>plain</p>\n", "representation": "storage"}
    }


def test_redirect_to_login_raises_confluence_error(client, confluence):
    confluence.add(
        "GET",
        f"{API}/content/7",
        status=302,
        text="",
        headers={"Location": "https://wiki.example.net/login"},
    )

    with pytest.raises(ConfluenceError) as excinfo:
        client.get_page("7")

    assert excinfo.value.status_code == 302
    assert len(confluence.requests) == 1


def test_non_json_success_raises_confluence_error(client, confluence):
    confluence.add("GET", f"{API}/content/search", text="<html>SSO</html>")

    with pytest.raises(ConfluenceError) as excinfo:
        client.search("type=page")

    assert excinfo.value.status_code == 200
    assert excinfo.value.body == "<html>SSO</html>"
