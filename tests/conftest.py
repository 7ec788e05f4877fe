import json

import httpx
import pytest

from adfpress.confluence import ConfluenceClient
from adfpress.trello import TrelloClient


class Recorder:
    """Mock REST service: answers from a route table and records every request."""

    def __init__(self):
        self.requests = []
        self.routes = {}

    def add(self, method, path, status=200, body=None, text=None, headers=None):
        self.routes[(method, path)] = (status, body if body is not None else {}, text, headers)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "no route"})
        status, body, text, headers = route
        if text is not None:
            return httpx.Response(status, text=text, headers=headers)
        return httpx.Response(status, json=body, headers=headers)

    def json_body(self, index=-1):
        return json.loads(self.requests[index].content)


@pytest.fixture()
def confluence():
    return Recorder()


@pytest.fixture()
def client(confluence):
    with ConfluenceClient(
        "https://wiki.example.net/",
        "JSESSIONID=abc",
        transport=httpx.MockTransport(confluence),
    ) as c:
        yield c


@pytest.fixture()
def trello_api():
    return Recorder()


@pytest.fixture()
def trello(trello_api):
    with TrelloClient("k3y", "t0ken", transport=httpx.MockTransport(trello_api)) as c:
        yield c
