"""Entry point for the AI review fallback diagnostic CLI."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ai_review.config.settings import Settings, get_settings, load_settings_from_yaml
from ai_review.core.audit import LoggingAuditSink
from ai_review.core.orchestrator import FallbackOrchestrator
from ai_review.reviewing.models import ReviewContext, ReviewFile


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="ai-review",
        description="Inspect AI review fallback decisions",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML settings file (default: environment / built-in defaults)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Decide command
    decide_parser = subparsers.add_parser(
        "decide",
        help="Show the recovery decision for a failure",
    )
    decide_parser.add_argument(
        "-m", "--message",
        required=True,
        help="Error message reported by the AI caller",
    )
    decide_parser.add_argument(
        "-n", "--name",
        default="Error",
        help="Error name, e.g. TimeoutError (default: Error)",
    )
    decide_parser.add_argument(
        "-a", "--attempt",
        type=int,
        default=1,
        help="Attempt number that failed (default: 1)",
    )
    decide_parser.add_argument(
        "-b", "--branch",
        default="",
        help="Target branch of the change",
    )
    decide_parser.add_argument(
        "--repository",
        default="",
        help="Repository name",
    )

    # Degraded command
    degraded_parser = subparsers.add_parser(
        "degraded",
        help="Run the static-analysis fallback review over local files",
    )
    degraded_parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="Files to analyze",
    )
    degraded_parser.add_argument(
        "-b", "--branch",
        default="",
        help="Target branch of the change",
    )

    # Config command
    subparsers.add_parser(
        "config",
        help="Show the effective fallback configuration",
    )

    return parser.parse_args(argv)


def load_settings(config_path: Path | None) -> Settings:
    """Settings from ``config_path`` when given, else the cached defaults."""
    if config_path is not None:
        return load_settings_from_yaml(config_path)
    return get_settings()


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_decide(args: argparse.Namespace, orchestrator: FallbackOrchestrator) -> int:
    """Print the decision for a described failure."""
    context = ReviewContext.from_mapping({
        "repository": args.repository,
        "target_branch": args.branch,
    })
    decision = orchestrator.handle(
        {"name": args.name, "message": args.message},
        context,
        args.attempt,
    )
    _print_json(decision.to_dict())
    return 0


def cmd_degraded(args: argparse.Namespace, orchestrator: FallbackOrchestrator) -> int:
    """Print a degraded review of local files."""
    files = []
    for path in args.files:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            print(f"Skipping {path}: {e}", file=sys.stderr)
            continue
        files.append(ReviewFile(path=str(path), content=content))

    context = ReviewContext.from_mapping({"target_branch": args.branch})
    decision = orchestrator.degraded_review(context, files)
    _print_json(decision.to_dict())
    return 0


def cmd_config(orchestrator: FallbackOrchestrator) -> int:
    """Print the effective fallback configuration."""
    _print_json(orchestrator.get_configuration())
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, debug=args.debug)

    if args.command is None:
        print("Usage: python -m ai_review decide -n TimeoutError -m 'Request timeout' -a 1")
        print("       python -m ai_review degraded src/app.js src/db.js")
        print("       python -m ai_review config")
        return 0

    try:
        settings = load_settings(args.config)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    orchestrator = FallbackOrchestrator(settings.fallbacks, audit_sink=LoggingAuditSink())

    if args.command == "decide":
        return cmd_decide(args, orchestrator)
    elif args.command == "degraded":
        return cmd_degraded(args, orchestrator)
    elif args.command == "config":
        return cmd_config(orchestrator)
    else:
        print(f"Unknown command: {args.command}")
        return 1


def cli_main() -> None:
    """CLI entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
