import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from lotus import __version__
from lotus.app_shell.runner import (
    PATTERNS_DIR,
    RULES_DIR,
    SCRIPTS_DIR,
    TESTS_DIR,
    DefaultArguments,
    default_runner,
)
from lotus.components.runner import RunOutput
from lotus.core.errors import LotusError

logger = logging.getLogger("lotus.cli")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
STATUS_LABELS = {"passed": "ok", "failed": "FAILED", "errored": "ERROR"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lotus",
        description="Run Logstash rule test cases against a throwaway Logstash container.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "target",
        nargs="?",
        type=Path,
        help="Project directory holding the rules and tests directories (default: cwd)",
    )
    parser.add_argument(
        "-n",
        "--no-delete-container",
        action="store_true",
        help="Keep the Docker container after the test run",
    )
    parser.add_argument(
        "-r",
        "--rules-dir",
        default=os.environ.get("LOTUS_RULES_DIR", RULES_DIR),
        help="Location of the Logstash rules, relative to the target",
    )
    parser.add_argument(
        "-t",
        "--tests-dir",
        default=os.environ.get("LOTUS_TESTS_DIR", TESTS_DIR),
        help="Location of the test cases, relative to the target",
    )
    parser.add_argument(
        "--scripts-dir",
        default=os.environ.get("LOTUS_SCRIPTS_DIR", SCRIPTS_DIR),
        help="Location of Ruby filter scripts, relative to the target",
    )
    parser.add_argument(
        "--patterns-dir",
        default=os.environ.get("LOTUS_PATTERNS_DIR", PATTERNS_DIR),
        help="Location of grok patterns, relative to the target",
    )
    parser.add_argument("--config", type=Path, help="Path to a lotus.yaml file")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.environ.get("LOTUS_LOG_LEVEL", "INFO").upper(),
        help="Logging level (default: INFO)",
    )
    return parser


def format_report(output: RunOutput) -> str:
    """Human-readable summary: one line per attempted case, then any errors."""
    lines = [
        f"test {result.name} ... {STATUS_LABELS[result.status]}" for result in output.results
    ]

    for label, error in (
        ("error", output.error),
        ("teardown error", output.teardown_error),
        ("collector error", output.collector_error),
    ):
        if error is not None:
            lines.append("")
            lines.append(f"{label}: {error}")

    passed = sum(1 for r in output.results if r.passed)
    failed = len(output.results) - passed
    verdict = "ok" if output.success else "FAILED"
    lines.append("")
    lines.append(f"test result: {verdict}. {passed} passed; {failed} failed")
    return "\n".join(lines)


def run(args: argparse.Namespace) -> int:
    arguments = DefaultArguments(
        target=args.target,
        no_delete_container=args.no_delete_container,
        rules_dir=args.rules_dir,
        tests_dir=args.tests_dir,
        scripts_dir=args.scripts_dir,
        patterns_dir=args.patterns_dir,
        config=args.config,
    )
    try:
        output = asyncio.run(default_runner(arguments))
    except LotusError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(format_report(output))
    return 0 if output.success else 1


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log_level not in LOG_LEVELS:
        choices = ", ".join(LOG_LEVELS)
        parser.error(f"invalid log level {args.log_level!r} (choose from {choices})")

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Parsed command line arguments: %s", args)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
