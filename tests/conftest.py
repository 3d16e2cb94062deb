"""Shared fixtures: an in-memory website served through a fake requests session."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Union

import pytest
from requests.structures import CaseInsensitiveDict

HTML = "text/html; charset=utf-8"


def page(*hrefs: str) -> str:
    """Build a minimal HTML document linking to every href."""
    anchors = "\n".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<!DOCTYPE html><html><head><title>t</title></head><body>{anchors}</body></html>"


class FakeResponse:
    def __init__(self, url: str, status_code: int, headers: Dict[str, str], text: str) -> None:
        self.url = url
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers)
        self._text = text
        self.read = False

    @property
    def text(self) -> str:
        self.read = True
        return self._text

    def close(self) -> None:
        pass

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class FakeSite:
    """
    Routes URL -> response. Unknown URLs answer 404.

    A route may also be an exception instance, raised from `get()`.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Union[tuple, BaseException]] = {}
        self.requests: List[str] = []
        self.responses: Dict[str, FakeResponse] = {}
        self.sessions: List["FakeSession"] = []
        self._lock = threading.Lock()

    def html(self, url: str, *hrefs: str, status: int = 200) -> None:
        self.routes[url] = (status, {"Content-Type": HTML}, page(*hrefs))

    def respond(self, url: str, status: int, headers: Optional[Dict[str, str]] = None, body: str = "") -> None:
        self.routes[url] = (status, headers or {}, body)

    def redirect(self, url: str, location: str, status: int = 301) -> None:
        self.routes[url] = (status, {"Location": location}, "")

    def fail(self, url: str, error: BaseException) -> None:
        self.routes[url] = error

    def session(self) -> "FakeSession":
        session = FakeSession(self)
        with self._lock:
            self.sessions.append(session)
        return session

    def get(self, url: str) -> FakeResponse:
        with self._lock:
            self.requests.append(url)
        route = self.routes.get(url, (404, {"Content-Type": HTML}, "Not Found"))
        if isinstance(route, BaseException):
            raise route
        status, headers, body = route
        response = FakeResponse(url, status, headers, body)
        with self._lock:
            self.responses[url] = response
        return response


class FakeSession:
    def __init__(self, site: FakeSite) -> None:
        self.site = site
        self.headers: Dict[str, str] = {}
        self.calls: List[dict] = []
        self.closed = False

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.calls.append(dict(kwargs, url=url))
        return self.site.get(url)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()
