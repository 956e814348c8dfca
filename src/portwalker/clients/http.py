"""Thin HTTP transport for the workflow: one GET or one JSON POST, no retries."""

import json
import logging
from typing import Any

import requests
from requests.exceptions import RequestException

from ..core.errors import TransportError
from ..core.models import Response

log = logging.getLogger("portwalker.http")

USER_AGENT = "portwalker/0.1"


class HttpClient:
    """
    Issues single requests against ``http://host:port/path``.

    No timeout is set on workflow requests and status codes are never
    inspected: a 404 or 500 comes back like any other response and the
    caller decides what the body means.
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self._session = session

    @staticmethod
    def url(host: str, port: int, path: str) -> str:
        return f"http://{host}:{port}{path}"

    def get(self, host: str, port: int, path: str) -> Response:
        url = self.url(host, port, path)
        log.debug("GET %s", url)
        try:
            resp = self._session.get(url)
            body = resp.text
        except RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}", path) from exc

        return Response(
            status=f"{resp.status_code} {resp.reason or ''}".strip(),
            status_code=resp.status_code,
            headers=dict(resp.headers),
            body=body,
        )

    def post(self, host: str, port: int, path: str, payload: Any) -> bytes:
        url = self.url(host, port, path)
        try:
            data = json.dumps(payload)
        except (TypeError, ValueError) as exc:
            raise TransportError(f"cannot encode body for {path}: {exc}", path) from exc

        log.debug("POST %s %s", url, data)
        try:
            resp = self._session.post(
                url,
                data=data.encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
            return resp.content
        except RequestException as exc:
            raise TransportError(f"POST {url} failed: {exc}", path) from exc

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
