"""Workflow engine
-----------------
Walks the fixed endpoint list against every open port, one port at a time,
carrying a fresh :class:`Session` through each walk.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from rich.console import Console
from rich.markup import escape

from ..clients.http import HttpClient
from .config import Config
from .decoders import decode_level, decode_secret
from .errors import TransportError
from .models import (
    ENDPOINTS,
    NOT_READY_SENTINEL,
    Endpoint,
    Phase,
    PortReport,
    Session,
    Status,
    StepOutcome,
    Write,
    build_submission,
)
from .state import WalkState

log = logging.getLogger("portwalker.workflow")


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class WorkflowEngine:
    def __init__(
        self,
        config: Config,
        client: HttpClient | None = None,
        console: Console | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config  = config
        self.client  = client or HttpClient()
        self.console = console or Console()
        self._sleep  = sleep

    @property
    def host(self) -> str:
        return self.config.target.host

    # ------------- public API -------------

    def run(self, ports: Iterable[int]) -> list[PortReport]:
        """Walk every port, strictly one after the other."""
        reports = []
        for port in sorted(ports):
            reports.append(self.walk(port))
        return reports

    def walk(self, port: int) -> PortReport:
        state   = WalkState()
        session = Session(self.config.user)
        report  = PortReport(port, session)

        for endpoint in ENDPOINTS:
            self.console.rule(f"[bold]port {port} · {endpoint.path}[/]")
            if not self._step(endpoint, port, session, state, report):
                state.abort()
                failure = report.outcomes[-1]
                log.warning(
                    "port %d: %s %s (%s), skipping remaining endpoints",
                    port, endpoint.path, failure.status.value, failure.error,
                )
                self.console.print(
                    f"[red]Port {port}, path {escape(endpoint.path)}: "
                    f"{escape(failure.error or failure.status.value)}[/]"
                )
                break

        report.phase = state.phase
        log.info("port %d finished in %s", port, state.phase.name)
        return report

    # ------------- steps -------------

    def _step(
        self,
        endpoint: Endpoint,
        port: int,
        session: Session,
        state: WalkState,
        report: PortReport,
    ) -> bool:
        if endpoint.read:
            outcome = self._read(port, endpoint.path)
            report.outcomes.append(outcome)
            if not outcome.ok:
                return False

        match endpoint.write:
            case Write.NONE:
                return True
            case Write.USER | Write.USER_SECRET:
                if endpoint.write is Write.USER_SECRET:
                    state.advance(Phase.INFORMATIONAL)
                outcome = self._write(
                    port, endpoint.path,
                    session.body(with_secret=endpoint.write is Write.USER_SECRET),
                )
            case Write.POLL_SECRET:
                state.advance(Phase.AWAITING_SECRET)
                outcome = self._poll_secret(port, endpoint.path, session)
                if outcome.ok:
                    state.advance(Phase.HAVE_SECRET)
            case Write.LEVEL:
                state.advance(Phase.AWAITING_LEVEL)
                outcome = self._fetch_level(port, endpoint.path, session)
                if outcome.ok:
                    state.advance(Phase.HAVE_LEVEL)
            case Write.SUBMIT:
                state.advance(Phase.SUBMITTING)
                outcome = self._write(port, endpoint.path, build_submission(session))
                if outcome.ok:
                    state.advance(Phase.DONE)

        report.outcomes.append(outcome)
        return outcome.ok

    def _read(self, port: int, path: str) -> StepOutcome:
        try:
            resp = self.client.get(self.host, port, path)
        except TransportError as exc:
            return StepOutcome(path, Status.TRANSPORT_FAILURE, error=str(exc))

        self.console.print("[cyan]--GENERAL INFOS--[/]")
        self.console.print(f"Port {port}: Status : {escape(resp.status)}")
        self.console.print(f"Port {port}: Headers : {escape(str(resp.headers))}")
        self.console.print(f"Port {port}: Body : {escape(resp.body)}")
        if not 200 <= resp.status_code < 300:
            log.info("port %d: GET %s returned %s", port, path, resp.status)
        return StepOutcome(path, Status.OK, body=resp.body)

    def _write(self, port: int, path: str, payload: dict) -> StepOutcome:
        try:
            body = _text(self.client.post(self.host, port, path, payload))
        except TransportError as exc:
            return StepOutcome(path, Status.TRANSPORT_FAILURE, error=str(exc))
        self.console.print(f"{escape(path)} Response: {escape(body)}")
        return StepOutcome(path, Status.OK, body=body)

    def _poll_secret(self, port: int, path: str, session: Session) -> StepOutcome:
        policy  = self.config.secret_poll
        attempt = 0
        while policy.allows(attempt + 1):
            if attempt and policy.backoff:
                self._sleep(policy.backoff)
            attempt += 1

            outcome = self._write(port, path, session.body())
            outcome.attempts = attempt
            if not outcome.ok:
                return outcome
            if outcome.body == NOT_READY_SENTINEL:
                log.debug("port %d: secret not ready (attempt %d)", port, attempt)
                continue

            decoded = decode_secret(outcome.body)
            if not decoded.ok:
                outcome.status = Status.PARSE_FAILURE
                outcome.error  = str(decoded.error)
                return outcome
            session.secret = decoded.value
            log.info("port %d: got secret after %d request(s)", port, attempt)
            return outcome

        return StepOutcome(
            path, Status.NOT_READY, body=NOT_READY_SENTINEL,
            error=f"secret still not ready after {attempt} request(s)",
            attempts=attempt,
        )

    def _fetch_level(self, port: int, path: str, session: Session) -> StepOutcome:
        outcome = self._write(port, path, session.body(with_secret=True))
        if not outcome.ok:
            return outcome

        decoded = decode_level(outcome.body)
        if not decoded.ok:
            outcome.status = Status.PARSE_FAILURE
            outcome.error  = str(decoded.error)
            return outcome
        session.level = decoded.value
        return outcome
