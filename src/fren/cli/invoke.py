"""
Invoke a single request against a Fren core from the command line.

Acts as a minimal host: it supplies the blob store, the dialogs and the
origin, dispatches one request and prints the response as JSON.

Usage:
    fren-invoke --origin https://example.org --method hello --state state.json --backend json
    fren-invoke --origin https://example.org --method set_config \\
        --params '{"type": "openai", "apiKey": "sk-..."}' --approve
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.settings import FrenSettings
from ..core.exceptions import FrenError, ValidationError
from ..core.logging import configure_logging
from ..host.dialogs import ConsoleDialogs, FixedDecisionDialogs
from ..runners.context import DispatchResult
from ..runners.dispatcher import RequestDispatcher
from ..runners.methods import get_method_registry
from ..storage.blob_store import create_blob_store
from ..storage.state_store import StateStore


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fren core - dispatch a single request",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--origin",
        type=str,
        default="cli",
        help="Origin the request is made on behalf of (default: cli)"
    )
    parser.add_argument(
        "--method",
        type=str,
        help="Method to invoke"
    )
    parser.add_argument(
        "--params",
        type=str,
        default=None,
        help="Method params as a JSON string"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file"
    )
    parser.add_argument(
        "--backend",
        choices=["memory", "json", "sqlite"],
        default=None,
        help="State backend (default: from settings)"
    )
    parser.add_argument(
        "--state",
        type=str,
        default=None,
        help="State file path for the json/sqlite backends (default: from settings)"
    )

    decision_group = parser.add_mutually_exclusive_group(required=False)
    decision_group.add_argument(
        "--approve",
        action="store_true",
        help="Accept every confirmation without prompting"
    )
    decision_group.add_argument(
        "--deny",
        action="store_true",
        help="Decline every confirmation without prompting"
    )

    parser.add_argument(
        "--list-methods",
        action="store_true",
        help="List available methods and exit"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    return parser


def main(argv=None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv()

    try:
        settings = FrenSettings(args.config)
        log_level = logging.DEBUG if args.verbose else settings.get_log_level()
        provider_settings = settings.get_provider_settings()
    except FrenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(
        level=log_level,
        structured=settings.is_structured_logging(),
    )

    if args.list_methods:
        print("Available methods:")
        for definition in get_method_registry().list_definitions():
            print(f"  {definition.method} (auth: {definition.auth.value})")
            print(f"    {definition.description}")
        return 0

    if not args.method:
        parser.error("--method is required unless --list-methods is given")

    request = {"method": args.method}
    if args.params is not None:
        try:
            request["params"] = json.loads(args.params)
        except json.JSONDecodeError as e:
            response = DispatchResult.failure(ValidationError(f"--params is not valid JSON: {e}"))
            print(json.dumps(response.to_dict(), indent=2))
            return 1

    state_config = settings.get_state_config()
    backend = args.backend or state_config.get("backend", "memory")
    path = args.state or state_config.get("path")
    try:
        blob_store = create_blob_store(backend, path)
    except ValueError as e:
        parser.error(str(e))

    if args.approve:
        dialogs = FixedDecisionDialogs(True)
    elif args.deny:
        dialogs = FixedDecisionDialogs(False)
    else:
        dialogs = ConsoleDialogs()

    dispatcher = RequestDispatcher(
        StateStore(blob_store),
        dialogs,
        provider_settings=provider_settings,
    )
    try:
        response = dispatcher.handle(args.origin, request)
    finally:
        blob_store.close()

    print(json.dumps(response.to_dict(), indent=2))
    return 0 if response.ok else 1


if __name__ == "__main__":
    sys.exit(main())
