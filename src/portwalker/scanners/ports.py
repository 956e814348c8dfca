from __future__ import annotations
import logging, socket
from concurrent.futures import ThreadPoolExecutor
from typing import Set

from ..core.models import PortRange

log = logging.getLogger("portwalker.scanner")

DEFAULT_WORKERS = 100


def check_port(host: str, port: int, timeout: float) -> bool:
    """One TCP connect attempt. Any failure counts as closed."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except (OSError, UnicodeError) as exc:  # refused, timed out, unreachable, bad host
        log.debug("%s:%d closed (%s)", host, port, exc)
        return False


def scan(
    host: str,
    start: int,
    end: int,
    timeout: float,
    workers: int = DEFAULT_WORKERS,
) -> Set[int]:
    """
    Probe every port in [start, end] once and return the ones that accepted
    a connection. The returned set carries no ordering.
    """
    target = PortRange(host, start, end, timeout)
    return scan_range(target, workers)


def scan_range(target: PortRange, workers: int = DEFAULT_WORKERS) -> Set[int]:
    if workers < 1:
        raise ValueError("workers must be >= 1")

    pool_size = min(workers, len(target))
    log.info(
        "scanning %s ports %d-%d (%d probes, %d workers, timeout %.3fs)",
        target.host, target.start, target.end, len(target), pool_size, target.timeout,
    )

    # leaving the with-block waits for every probe
    with ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="probe") as pool:
        futures = {
            pool.submit(check_port, target.host, port, target.timeout): port
            for port in target.ports()
        }

    open_ports = {port for future, port in futures.items() if future.result()}
    log.info("%s: %d open port(s)", target.host, len(open_ports))
    return open_ports
