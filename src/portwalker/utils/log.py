import logging

from rich.console import Console
from rich.logging import RichHandler

log = logging.getLogger("portwalker")


def setup_logging(level: str = "WARNING", console: Console | None = None) -> None:
    """Route the portwalker.* loggers through rich, once."""
    for handler in list(log.handlers):
        if isinstance(handler, RichHandler):
            log.removeHandler(handler)

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    log.addHandler(handler)
    log.setLevel(level)
    log.propagate = False
