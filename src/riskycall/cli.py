"""riskycall CLI Entry Point.

Runs a shell command under a RetryExecutor:

    riskycall run --max-attempts 5 --delay 500 -- curl -fsS https://example.com

Exit code is 0 when an attempt succeeds, otherwise the return code of the
last failed attempt (1 if the command could not be started).
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional

import structlog
import typer

from riskycall.core.config import ConfigurationError, get_settings
from riskycall.core.logs import configure_logging
from riskycall.core.models import Cancelled, Success
from riskycall.retry.executor import RetryExecutor

log = structlog.get_logger()

app = typer.Typer(
    name="riskycall",
    help="riskycall - retry flaky commands with backoff",
    no_args_is_help=True,
)


def load_config_callback(config: Optional[Path]) -> Optional[Path]:
    """Load configuration file if provided, then configure logging."""
    if config:
        if not config.exists():
            typer.echo(f"Error: Config file '{config}' not found", err=True)
            raise typer.Exit(code=1)

        try:
            get_settings(force_reload=True, system_config_path=config)
        except ConfigurationError as e:
            typer.echo(f"Error loading config: {e}", err=True)
            raise typer.Exit(code=1)

    configure_logging()
    if config:
        log.debug("config_loaded", path=str(config))
    return config


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        callback=load_config_callback,
        is_eager=True,
        help="Path to configuration file",
    ),
) -> None:
    """riskycall CLI."""


def run_command(command: List[str]) -> int:
    """Run ``command`` once; raise CalledProcessError on a non-zero exit."""
    completed = subprocess.run(list(command), check=True)
    return completed.returncode


@app.command("run")
def run(
    command: List[str] = typer.Argument(..., help="Command and arguments to run"),
    max_attempts: Optional[int] = typer.Option(
        None, "--max-attempts", "-n", min=1, help="Maximum number of attempts"
    ),
    delay: Optional[int] = typer.Option(
        None, "--delay", "-d", min=0, help="Base delay between attempts (ms)"
    ),
    multiplier: Optional[float] = typer.Option(
        None, "--multiplier", "-m", min=1.0, help="Delay growth factor"
    ),
    no_multiplier: bool = typer.Option(
        False, "--no-multiplier", help="Keep the delay constant between attempts"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress retry logging"),
) -> None:
    """Run COMMAND, retrying it while it fails."""
    overrides = {
        "max_attempts": max_attempts,
        "delay": delay,
        "delay_multiplier": multiplier,
    }
    cfg = get_settings().retry.model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )
    if no_multiplier:
        cfg = cfg.model_copy(update={"use_delay_multiplier": False})
    if quiet:
        cfg = cfg.model_copy(update={"quiet": True})

    executor = RetryExecutor.from_config(lambda: run_command(command), cfg)
    result = executor.attempt()

    if isinstance(result, Success):
        return

    if isinstance(result, Cancelled):  # pragma: no cover
        raise typer.Exit(code=1)

    cause = result.error.__cause__
    if isinstance(cause, subprocess.CalledProcessError):
        exit_code = cause.returncode if cause.returncode > 0 else 1
    else:
        exit_code = 1

    if not cfg.quiet:
        typer.echo(
            f"Error: command failed after {result.attempts} attempt(s): "
            f"{result.error.message}",
            err=True,
        )
    raise typer.Exit(code=exit_code)


if __name__ == "__main__":  # pragma: no cover
    app()
