from __future__ import annotations

import io
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

import pytest
from rich.console import Console

from portwalker.core.config import Config
from portwalker.core.errors import TransportError
from portwalker.core.models import PortRange, RetryPolicy, Response

SECRET_BODY = "User secret: abc123"
LEVEL_BODY = "User level: 4"


class FakeClient:
    """Stands in for HttpClient; records every call in order."""

    def __init__(
        self,
        posts: dict[str, Iterable[str]] | None = None,
        fail: set[tuple[int, str]] | None = None,
    ) -> None:
        self.calls: list[tuple[str, int, str, Any]] = []
        self.fail = fail or set()
        self._posts: dict[str, list[str]] = defaultdict(list)
        self._posts["/getUserSecret"] = [SECRET_BODY]
        self._posts["/getUserLevel"] = [LEVEL_BODY]
        for path, bodies in (posts or {}).items():
            self._posts[path] = list(bodies)

    def get(self, host: str, port: int, path: str) -> Response:
        self.calls.append(("GET", port, path, None))
        if (port, path) in self.fail:
            raise TransportError(f"GET {path} refused", path)
        return Response("200 OK", 200, {"Content-Type": "text/plain"}, f"GET {path}")

    def post(self, host: str, port: int, path: str, payload: Any) -> bytes:
        self.calls.append(("POST", port, path, payload))
        if (port, path) in self.fail:
            raise TransportError(f"POST {path} refused", path)
        queue = self._posts[path]
        if len(queue) > 1:
            return queue.pop(0).encode()
        return (queue[0] if queue else f"ok {path}").encode()

    def requests_for(self, path: str) -> list[tuple[str, int, str, Any]]:
        return [c for c in self.calls if c[2] == path]

    def close(self) -> None:
        pass

    def __enter__(self) -> "FakeClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def make_config(**overrides: Any) -> Config:
    values: dict[str, Any] = {
        "target": PortRange("127.0.0.1", 8080, 8090, 0.2),
        "user": "testUser",
        "secret_poll": RetryPolicy(max_attempts=10),
    }
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=200)


@pytest.fixture
def config() -> Config:
    return make_config()
