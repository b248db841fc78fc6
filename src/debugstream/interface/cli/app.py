from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: diagnostics logging bootstrap, activation
of the annotated error stream around a script run, on-demand retention
purges for external schedulers (cron, systemd timers, Task Scheduler) and
inspection of the newest persisted lines.
"""

import argparse
import os
import runpy
import sys
from typing import List, Optional

from debugstream.core.context import DebugStreamContext, get_default_context
from debugstream.core.purger import delete_old_logs
from debugstream.infra.fs import get_default_log_dir, log_file_path, normalize_path
from debugstream.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_logger,
    get_recent_lines,
)
from debugstream.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 for success, non-zero for failure).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (diagnostics stay on the real stderr)
    log_level = "DEBUG" if args.debug else "WARNING"
    configure_logging(LoggingConfig(level=log_level, console=True))

    logger.debug(f"CLI execution initiated: command={args.command}")

    # 3. Command routing
    try:
        if args.command == "run":
            return _run_script(args, get_default_context())
        if args.command == "purge":
            return _purge(args)
        if args.command == "tail":
            return _tail(args)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return 130

    parser.error(f"Unknown command: {args.command}")
    return 2

# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _run_script(args: argparse.Namespace, context: DebugStreamContext) -> int:
    """
    Activate the error stream and execute a script as __main__.

    Args:
        args: Parsed 'run' arguments.
        context: Context to activate.

    Returns:
        int: The script's exit status.
    """
    script = os.path.abspath(args.script)
    if not os.path.isfile(script):
        print(f"ERROR: Script not found: {script}", file=sys.stderr)
        return 2

    try:
        persisted = context.activate(**cli_args.args_to_activation(args))
    except ValueError as e:
        print(f"ERROR: Invalid activation parameter: {e}", file=sys.stderr)
        return 2

    if persisted and context.state.persister is not None:
        logger.info(f"Persisting annotated stderr to {context.state.persister.current_path}")

    saved_argv = sys.argv
    sys.argv = [script] + list(args.script_args)
    script_dir = os.path.dirname(script)
    sys.path.insert(0, script_dir)
    try:
        runpy.run_path(script, run_name="__main__")
        return 0
    except SystemExit as e:
        return _exit_code(e.code)
    except Exception:
        # Printed through the intercepted stream, so the trace is annotated too
        sys.excepthook(*sys.exc_info())
        return 1
    finally:
        sys.argv = saved_argv
        if sys.path and sys.path[0] == script_dir:
            sys.path.pop(0)
        sys.stderr.flush()


def _purge(args: argparse.Namespace) -> int:
    """Run one retention purge and print how many files were removed."""
    if args.retention_days < 0:
        print("ERROR: --days must be >= 0", file=sys.stderr)
        return 2

    directory = normalize_path(args.path, get_default_log_dir())
    deleted = delete_old_logs(args.retention_days, directory)
    logger.debug(f"Purge of {directory} finished.")
    print(f"Deleted {deleted} log file(s) older than {args.retention_days} day(s) from {directory}")
    return 0


def _tail(args: argparse.Namespace) -> int:
    """Print the newest lines of generation 0 of a log file set."""
    directory = normalize_path(args.path, get_default_log_dir())
    path = log_file_path(directory, args.file_identifier)
    try:
        content = get_recent_lines(path, args.n_lines)
    except FileNotFoundError:
        print(f"ERROR: Log file not found: {path}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"ERROR: Cannot read {path}: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(content)
    return 0

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _exit_code(code: object) -> int:
    """Map a SystemExit payload to a process exit status."""
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    print(code, file=sys.stderr)
    return 1

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
