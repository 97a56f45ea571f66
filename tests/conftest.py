from __future__ import annotations

import io
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from rspamd_client import Client

BASE_URL = "http://rspamdexample.com"

SAMPLE_MESSAGE = (
    b"From: sender@example.com\r\n"
    b"To: recipient@example.com\r\n"
    b"Subject: Cheap watches\r\n"
    b"Message-ID: <sample-1@example.com>\r\n"
    b"\r\n"
    b"Buy now!\r\n"
)


@dataclass
class SentRequest:
    """What the fake transport saw for a single request."""

    method: str
    path: str
    headers: CaseInsensitiveDict
    body: bytes


Responder = Callable[[requests.PreparedRequest], requests.Response]


class FakeTransport(BaseAdapter):
    """Transport adapter that answers from registered responders."""

    def __init__(self) -> None:
        super().__init__()
        self.responders: dict[tuple[str, str], Responder] = {}
        self.sent: list[SentRequest] = []

    def register(self, method: str, path: str, responder: Responder) -> None:
        self.responders[(method, path)] = responder

    def reply(self, method: str, path: str, status: int, payload: Any) -> None:
        self.register(method, path, lambda request: json_response(request, status, payload))

    def fail(self, method: str, path: str, exc: Exception) -> None:
        def _raise(_request: requests.PreparedRequest) -> requests.Response:
            raise exc

        self.register(method, path, _raise)

    def reset(self) -> None:
        self.responders.clear()
        self.sent.clear()

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        path = urlsplit(request.url).path
        self.sent.append(
            SentRequest(
                method=request.method,
                path=path,
                headers=CaseInsensitiveDict(request.headers),
                body=read_body(request.body),
            )
        )
        try:
            responder = self.responders[(request.method, path)]
        except KeyError as exc:
            raise requests.ConnectionError(f"no responder for {request.method} {path}") from exc
        return responder(request)

    def close(self) -> None:
        pass


def read_body(body: Any) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if hasattr(body, "read"):
        return body.read()
    return b"".join(body)


def text_response(
    request: requests.PreparedRequest,
    status: int,
    text: str,
    content_type: str = "text/plain",
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.headers["Content-Type"] = content_type
    response.raw = io.BytesIO(text.encode("utf-8"))
    response.encoding = "utf-8"
    response.url = request.url
    response.request = request
    return response


def json_response(request: requests.PreparedRequest, status: int, payload: Any) -> requests.Response:
    return text_response(request, status, json.dumps(payload), "application/json")


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo handlers installed by configure_logging during a test."""

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def session(transport: FakeTransport) -> requests.Session:
    http = requests.Session()
    http.trust_env = False
    http.mount("http://", transport)
    http.mount("https://", transport)
    return http


@pytest.fixture
def client(session: requests.Session) -> Client:
    return Client(BASE_URL, credentials=("username", "password"), session=session)
