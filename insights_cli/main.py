"""Main entry point for insights-cli.

This module provides the command-line interface for streaming collection
insights, including:
- Command-line argument parsing
- Logging setup
- The activation prompt and the streaming run
"""

import argparse
import asyncio
import os
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

logger = structlog.get_logger(__name__)

if TYPE_CHECKING:
    from insights_cli.core.config import Settings


def _cleanup_old_logs(log_dir: Path, *, keep_days: int = 7) -> None:
    """Remove log files older than keep_days."""
    cutoff = time.time() - (keep_days * 24 * 60 * 60)
    try:
        for path in log_dir.glob("*.log"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink(missing_ok=True)
            except OSError as e:
                logger.debug("cli_log_cleanup_file_failed", path=str(path), error=str(e))
                continue
    except OSError as e:
        logger.debug("cli_log_cleanup_failed", log_dir=str(log_dir), error=str(e))


def setup_logging(log_dir: Path) -> Path:
    """Redirect logging to a per-run log file.

    Returns:
        Path to the run's log file.
    """
    import logging

    log_dir.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs(log_dir, keep_days=7)

    timestamp = time.strftime("%Y%m%d-%H%M%S")
    log_file = log_dir / f"insights-cli-{timestamp}-{os.getpid()}.log"

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=structlog.processors.KeyValueRenderer())
    )

    # File handler only; the terminal belongs to the live view
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(file_handler)
    root.setLevel(logging.INFO)

    for logger_name in ["httpx", "httpcore", "asyncio"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return log_file


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="insights-cli",
        description="Stream AI insights about your media collection",
    )
    parser.add_argument(
        "--server",
        default=None,
        help="API server URL (default: $INSIGHTS_API_URL or http://localhost:8080)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="API bearer token (default: $INSIGHTS_TOKEN)",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Start generating without asking for confirmation",
    )
    parser.add_argument(
        "--stall-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Give up when the stream sends nothing for this long (default: wait forever)",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Print raw text as it arrives instead of a live view",
    )
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> "Settings":
    """Apply command line overrides on top of environment settings."""
    from insights_cli.core.config import Settings, settings

    stall_timeout = settings.stall_timeout
    if args.stall_timeout is not None and args.stall_timeout > 0:
        stall_timeout = args.stall_timeout

    return Settings(
        api_url=(args.server or settings.api_url).rstrip("/"),
        api_token=args.token or settings.api_token,
        stall_timeout=stall_timeout,
    )


def confirm_activation() -> bool:
    """Show the placeholder and ask whether to start generating."""
    from rich.prompt import Confirm

    from insights_cli.core import console
    from insights_cli.display import render_placeholder

    console.print(render_placeholder())
    return Confirm.ask("Generate insights?", console=console, default=True)


async def main(settings: "Settings", *, activated: bool, plain: bool = False) -> int:
    """Stream insights until the server finishes or fails.

    Args:
        settings: Resolved settings
        activated: Whether the user asked for insights
        plain: Print raw text instead of the live view

    Returns:
        Process exit code (1 when the stream ended in error)
    """
    from insights_cli.api.client import SSEStreamClient
    from insights_cli.core import console
    from insights_cli.display import InsightsView, PlainStreamPrinter
    from insights_cli.streaming import InsightsActivation, StreamBinding, StreamSession

    if not activated:
        return 0

    activation = InsightsActivation(settings.api_url, lambda: settings.api_token)
    url = activation.activate()
    if url is None:
        console.print("[red]No API token configured.[/red] Set INSIGHTS_TOKEN or pass --token.")
        return 1

    logger.info("cli_run_start", server_url=settings.api_url, stall_timeout=settings.stall_timeout)

    async with SSEStreamClient(base_url=settings.api_url, stall_timeout=settings.stall_timeout) as client:
        view = PlainStreamPrinter(console) if plain else InsightsView(console)
        with view:
            session = StreamSession(client.stream_events, on_change=view.update)
            async with StreamBinding(session) as binding:
                binding.bind(url)
                state = await session.wait()

    logger.info("cli_run_end", status=state.status.value, fragments=state.fragments)
    return 1 if state.error else 0


def run_cli(argv: list[str] | None = None) -> None:
    """Entry point for console script."""
    args = parse_args(argv)
    settings = resolve_settings(args)
    setup_logging(settings.log_dir)

    from insights_cli.core import console

    try:
        activated = args.yes or confirm_activation()
        sys.exit(asyncio.run(main(settings, activated=activated, plain=args.plain)))
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Interrupted[/yellow]")
        sys.exit(0)


if __name__ == "__main__":
    run_cli()
