"""Command line interface: follow a job's logs from the terminal."""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import platformdirs
from rich.console import Console

from . import __version__, configure_logging
from .file.follower import INITIAL_TAIL_BYTES
from .renderer import RENDER_LINE_LIMIT
from .session import DEFAULT_LOG_DIR, JobLogSession, SessionSnapshot
from .stream import StreamLabel
from .width import wrap_lines

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_POLL_INTERVAL = 0.25  # Seconds between polls in follow mode


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="jobtail",
        description="Render a job's stdout/stderr logs as a terminal would show them.",
    )
    parser.add_argument("job_id", nargs="?", help="Job ID; logs are read from <log-dir>/<job_id>.out and .err")
    parser.add_argument("--log-dir", type=Path, default=Path(DEFAULT_LOG_DIR), help="Directory holding job logs")
    parser.add_argument("--stdout", type=Path, help="Explicit stdout log file (requires --stderr)")
    parser.add_argument("--stderr", type=Path, help="Explicit stderr log file (requires --stdout)")
    parser.add_argument("--once", action="store_true", help="Print the current content and exit")
    parser.add_argument("--split", action="store_true", help="With --once, print stdout and stderr separately")
    parser.add_argument("--width", type=int, default=0, help="Wrap lines to this many columns")
    parser.add_argument("--interval", type=float, default=DEFAULT_POLL_INTERVAL, help="Seconds between polls")
    parser.add_argument("--lines", type=int, default=RENDER_LINE_LIMIT, help="Maximum lines kept per stream")
    parser.add_argument(
        "--tail-bytes", type=int, default=INITIAL_TAIL_BYTES, help="Bytes read from the end of existing logs"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--debug-log", action="store_true", help="Also write logs to the user log directory")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)
    if args.job_id and (args.stdout or args.stderr):
        parser.error("give either a job ID or --stdout/--stderr, not both")
    if bool(args.stdout) != bool(args.stderr):
        parser.error("--stdout and --stderr must be given together")
    if args.lines <= 0:
        parser.error("--lines must be positive")
    if args.tail_bytes <= 0:
        parser.error("--tail-bytes must be positive")
    if args.interval <= 0:
        parser.error("--interval must be positive")
    return args


def _setup_logging(args: argparse.Namespace) -> None:
    log_file = None
    if args.debug_log:
        log_dir = Path(platformdirs.user_log_dir("jobtail"))
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "jobtail.log"
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING, log_file)
    if log_file is not None:
        logger.info(f"Writing debug log to {log_file}")


def print_snapshot(console: Console, snapshot: SessionSnapshot, split: bool = False) -> None:
    """Print the full rendered content of a snapshot."""
    if split:
        console.print(f"==> stdout <==\n{snapshot.stdout}")
        console.print(f"==> stderr <==\n{snapshot.stderr}")
    elif snapshot.merged:
        console.print(snapshot.merged)


def follow(
    session: JobLogSession,
    console: Console,
    err_console: Console,
    interval: float = DEFAULT_POLL_INTERVAL,
    width: int = 0,
    max_polls: Optional[int] = None,
) -> None:
    """
    Poll the session and print each finalized line as it arrives.

    Args:
        session: Session with a job or file pair already selected
        console: Where log lines are printed
        err_console: Where read errors and notices are printed
        interval: Seconds to sleep between polls
        width: Wrap width for printed lines
        max_polls: Stop after this many polls (None follows forever)
    """
    waiting = set()
    polls = 0
    while max_polls is None or polls < max_polls:
        if polls:
            time.sleep(interval)
        snapshot = session.poll()
        polls += 1

        for error in snapshot.errors:
            err_console.print(error)

        for chunk in (snapshot.out_chunk, snapshot.err_chunk):
            if chunk.missing:
                if chunk.label not in waiting:
                    waiting.add(chunk.label)
                    err_console.print(session.waiting_message(chunk.label))
                continue
            waiting.discard(chunk.label)
            lines = [chunk.label.prefix(line) for line in chunk.new_lines]
            for row in wrap_lines(lines, width):
                console.print(row)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    _setup_logging(args)

    console = Console(markup=False, highlight=False, emoji=False, soft_wrap=True)
    err_console = Console(stderr=True, markup=False, highlight=False, emoji=False, soft_wrap=True)

    session = JobLogSession(args.log_dir, limit=args.lines, initial_tail_bytes=args.tail_bytes)
    if args.job_id:
        session.select_job(args.job_id)
    elif args.stdout:
        session.follow_paths(args.stdout, args.stderr)
    else:
        err_console.print("jobtail: a job ID or --stdout/--stderr is required")
        return 1

    if args.once:
        snapshot = session.poll(width=args.width, merged_width=args.width)
        for error in snapshot.errors:
            err_console.print(error)
        print_snapshot(console, snapshot, split=args.split)
        return 0

    try:
        follow(session, console, err_console, interval=args.interval, width=args.width)
    except KeyboardInterrupt:
        # Show progress lines that never got a trailing newline
        for label in StreamLabel:
            current = session.merged.current(label)
            if current:
                console.print(label.prefix(current))
    return 0


if __name__ == "__main__":
    sys.exit(main())
