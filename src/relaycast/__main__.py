"""CLI entry point for relaycast.

Runs one query or one publish against a set of relays and prints the
result as JSON on stdout. Logs go to stderr.

Examples:
    ```bash
    python -m relaycast query --kind 1 --limit 5
    python -m relaycast query --relay wss://nos.lol --author npub1... --tag t=nostr
    python -m relaycast publish --event signed.json --relay wss://relay.damus.io
    python -m relaycast query --config relaycast.yaml --log-level DEBUG
    ```
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from relaycast.core.exceptions import RelaycastError
from relaycast.core.logger import Logger, StructuredFormatter
from relaycast.core.yaml import load_yaml
from relaycast.tools.configs import ClientConfig
from relaycast.tools.events import ToolResult, publish_event, query_events


DEFAULT_CONFIG = Path("relaycast.yaml")

logger = Logger("cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="relaycast",
        description="Fan out Nostr queries and publishes across relays",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Client config path (default: {DEFAULT_CONFIG})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )
    parser.add_argument(
        "--relay",
        dest="relays",
        action="append",
        default=[],
        help="Relay URL (repeatable; default: configured relays)",
    )
    parser.add_argument(
        "--auth-key-env",
        help="Environment variable holding a NIP-42 secret key",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    query = commands.add_parser("query", help="Query events")
    query.add_argument("--kind", dest="kinds", type=int, action="append", help="Event kind")
    query.add_argument("--author", dest="authors", action="append", help="hex, npub, or nprofile")
    query.add_argument("--id", dest="ids", action="append", help="hex, note, or nevent")
    query.add_argument("--since", type=int, help="Unix seconds")
    query.add_argument("--until", type=int, help="Unix seconds")
    query.add_argument("--limit", type=int, help="1..200 (default: config query_limit)")
    query.add_argument(
        "--tag",
        dest="tags",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Tag filter, e.g. t=nostr (repeatable)",
    )
    query.add_argument("--search", help="NIP-50 search string")

    publish = commands.add_parser("publish", help="Publish a signed event")
    publish.add_argument(
        "--event",
        type=Path,
        required=True,
        help="JSON file with the signed event ('-' for stdin)",
    )

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure the root logger with structured formatting on stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def _load_config(path: Path, auth_key_env: str | None) -> ClientConfig:
    """Load the client config, returning defaults if the file does not exist."""
    data: dict[str, Any] = {}
    if path.exists():
        data = load_yaml(str(path))
    elif path != DEFAULT_CONFIG:
        logger.warning("config_not_found", path=str(path))
    if auth_key_env:
        data["auth_key_env"] = auth_key_env
    return ClientConfig.from_dict(data)


def _parse_tags(pairs: list[str]) -> dict[str, list[str]]:
    tags: dict[str, list[str]] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Invalid tag filter {pair!r}: expected KEY=VALUE")
        tags.setdefault(key, []).append(value)
    return tags


def _read_event(path: Path) -> Any:
    text = sys.stdin.read() if str(path) == "-" else path.read_text(encoding="utf-8")
    return json.loads(text)


async def run_command(args: argparse.Namespace, config: ClientConfig) -> ToolResult:
    """Dispatch the parsed subcommand to the matching tool."""
    if args.command == "query":
        return await query_events(
            args.relays or None,
            kinds=args.kinds,
            authors=args.authors,
            ids=args.ids,
            since=args.since,
            until=args.until,
            limit=args.limit,
            tags=_parse_tags(args.tags),
            search=args.search,
            config=config,
        )
    return await publish_event(
        _read_event(args.event),
        args.relays or None,
        config=config,
    )


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse args, load config, run the command, print JSON."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = _load_config(args.config, args.auth_key_env)
        result = await run_command(args, config)
    except (OSError, ValueError, RelaycastError) as e:
        logger.error("command_failed", command=args.command, error=str(e))
        return 2
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))  # noqa: T201
    return 0 if result.success else 1


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
