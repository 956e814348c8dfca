"""portwalker CLI
-----------------
Entry-point for the portwalker tool. Both commands read their settings from
the environment / ``.env`` (see ``core.config``) and take no options.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table
import typer

from .clients.http import HttpClient
from .core.config import Config, load_config
from .core.errors import ConfigurationError
from .core.models import PortReport
from .core.workflow import WorkflowEngine
from .scanners import ports as port_scan
from .utils.log import setup_logging

# ─────────────────────────────────────────────────────────────────────────────
# Globals & singletons
# ─────────────────────────────────────────────────────────────────────────────

app: typer.Typer = typer.Typer(add_completion=False, rich_markup_mode="rich")
console: Console = Console()

NO_OPEN_PORTS = "Couldn't find any open ports in the specified range."

# ─────────────────────────────────────────────────────────────────────────────
# Helper functions (not exposed as CLI commands)
# ─────────────────────────────────────────────────────────────────────────────


def _load() -> Config:
    try:
        config = load_config()
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1)
    setup_logging(config.log_level, console)
    return config


def _scan(config: Config) -> set[int]:
    target = config.target
    with console.status(f"[cyan]Scanning {target.host} ports {target.start}-{target.end}…[/]"):
        open_ports = port_scan.scan_range(target, config.workers)

    if open_ports:
        console.print(f"[bold green]Found open ports:[/] {escape(str(sorted(open_ports)))}")
    else:
        console.print(f"[yellow]{NO_OPEN_PORTS}[/]")
    return open_ports


def _summary(reports: list[PortReport]) -> Table:
    table = Table(title="Walk summary")
    table.add_column("Port", justify="right", style="cyan")
    table.add_column("Phase")
    table.add_column("Secret")
    table.add_column("Level", justify="right")
    table.add_column("Result")
    for report in reports:
        failure = report.failure
        if report.completed:
            result = escape(report.result or "")
        elif failure is not None:
            result = f"[red]{escape(failure.path)}: {escape(failure.error or failure.status.value)}[/]"
        else:
            result = ""
        table.add_row(
            str(report.port),
            "[green]DONE[/]" if report.completed else f"[red]{report.phase.name}[/]",
            escape(report.session.secret or "-"),
            "-" if report.session.level is None else str(report.session.level),
            result,
        )
    return table

# ─────────────────────────────────────────────────────────────────────────────
# Typer commands
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def scan() -> None:
    """Only discover open ports on the configured host."""
    _scan(_load())


@app.command()
def run() -> None:
    """Discover open ports, then walk the endpoint sequence on each of them."""
    config = _load()
    open_ports = _scan(config)
    if not open_ports:
        return

    with HttpClient() as client:
        engine = WorkflowEngine(config, client=client, console=console)
        reports = engine.run(open_ports)
    console.print(_summary(reports))


# ─────────────────────────────────────────────────────────────────────────────
# python -m portwalker.cli entry-point fallback
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
