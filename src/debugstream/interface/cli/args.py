from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema. The only flags besides the
diagnostic ones are the activation parameters themselves; they are mapped
onto the keyword arguments of DebugStreamContext.activate().
"""

import argparse
from typing import Any, Dict

from debugstream.domain.constants import (
    DEFAULT_MAX_FILE_COUNT,
    DEFAULT_MAX_FILE_SIZE_MB,
    DEFAULT_RETENTION_DAYS,
)

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the debugstream CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="debugstream",
        description="Annotate stderr with timestamps and call sites, with rotating log files.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate diagnostics verbosity to DEBUG.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    # --- Script execution under an intercepted stderr ---
    run = sub.add_parser("run", help="Run a Python script with annotated stderr.")
    run.add_argument("script", help="Path of the Python script to execute.")
    run.add_argument(
        "script_args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the script.",
    )
    run.add_argument(
        "--console-only",
        action="store_true",
        help="Annotate stderr without writing log files.",
    )
    _add_activation_arguments(run)

    # --- Retention maintenance ---
    purge = sub.add_parser("purge", help="Delete error logs older than a number of days.")
    purge.add_argument(
        "--days",
        dest="retention_days",
        type=int,
        required=True,
        help="Retention age in days.",
    )
    purge.add_argument("--path", dest="path", default=None, help="Log directory.")

    # --- Inspection ---
    tail = sub.add_parser("tail", help="Print the newest lines of a log file set.")
    tail.add_argument("--id", dest="file_identifier", required=True, help="File identifier.")
    tail.add_argument("--path", dest="path", default=None, help="Log directory.")
    tail.add_argument(
        "-n", "--lines",
        dest="n_lines",
        type=int,
        default=20,
        help="Number of lines to print (default: 20).",
    )

    return p


def _add_activation_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--id",
        dest="file_identifier",
        default=None,
        help="Log set identifier (default: activation time to the millisecond).",
    )
    p.add_argument(
        "--max-files",
        dest="max_file_count",
        type=int,
        default=None,
        help=f"Maximum number of log files (default: {DEFAULT_MAX_FILE_COUNT}).",
    )
    p.add_argument(
        "--max-size-mb",
        dest="max_file_size_mb",
        type=int,
        default=None,
        help=f"Maximum size of each log file in MB (default: {DEFAULT_MAX_FILE_SIZE_MB}).",
    )
    p.add_argument(
        "--retention-days",
        dest="retention_days",
        type=int,
        default=None,
        help=f"Delete log files older than this many days (default: {DEFAULT_RETENTION_DAYS}).",
    )
    p.add_argument(
        "--path",
        dest="path",
        default=None,
        help="Log directory (default: the platform log directory).",
    )

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_activation(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the parsed 'run' arguments into activate() keyword arguments.

    Console-only runs map to no arguments at all. Otherwise an absent
    identifier becomes "" so that persistence is requested even when every
    other flag is left at its default.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Keyword arguments for activate().
    """
    if getattr(args, "console_only", False):
        return {}

    return {
        "file_identifier": args.file_identifier or "",
        "max_file_count": args.max_file_count,
        "max_file_size_mb": args.max_file_size_mb,
        "retention_days": args.retention_days,
        "path": args.path or "",
    }
