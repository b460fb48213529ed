#!/usr/bin/env python3
"""
Melian Command Line Client

Fetch rows from a Melian server, print its schema, or explore it
interactively.

Usage:
    melian describe                                  # Print schema as JSON
    melian fetch people id 20                        # Fetch by names
    melian --dsn tcp://127.0.0.1:8765 fetch cats name Pixel
    melian --schema-spec 'cats#1|45|id:int;name:string' shell

Environment Variables:
    MELIAN_DSN          - Server DSN (unix:///path or tcp://host:port)
    MELIAN_TIMEOUT      - TCP connect timeout in seconds
    MELIAN_SCHEMA_SPEC  - Compact schema spec
    MELIAN_SCHEMA_FILE  - JSON schema file
    MELIAN_DEBUG        - Enable debug logging (true/false)
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .client import MelianClient
from .config.settings import settings
from .errors import ConfigurationError, MelianError
from .schema.model import IndexType

logger = logging.getLogger(__name__)


SHELL_HELP = """
Melian Commands:
----------------
  fetch <table> <column> <key>   Fetch a row by table and column names
  describe                       Ask the server for its schema
  tables                         List tables and lookup columns

Client Commands:
----------------
  help                           Show this help message
  reconnect                      Reconnect to the server
  status                         Show connection status
  exit                           Exit the client

Examples:
---------
  fetch people id 20             Integer column, key packed as 4 bytes
  fetch cats name Pixel          String column, key sent as UTF-8
"""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="melian",
        description="Melian: command line client for the Melian cache server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--dsn",
        type=str,
        default=settings.DSN,
        help="Server DSN: unix:///path or tcp://host:port",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.TIMEOUT,
        help="TCP connect timeout in seconds",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--schema-spec",
        type=str,
        default=None,
        help="Compact schema spec, e.g. 'people#0|60|id:int'",
    )
    source.add_argument(
        "--schema-file",
        type=str,
        default=None,
        help="Path to a JSON schema file",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("describe", help="Print the server schema as JSON")

    fetch = commands.add_parser("fetch", help="Fetch a row by table and column names")
    fetch.add_argument("table", help="Table name")
    fetch.add_argument("column", help="Lookup column name")
    fetch.add_argument("key", help="Lookup key")
    fetch.add_argument(
        "--int",
        dest="as_int",
        action="store_true",
        help="Send the key as an integer regardless of the column type",
    )

    commands.add_parser("shell", help="Start an interactive session")

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def fetch_row(client: MelianClient, table: str, column: str, key: str, as_int: bool = False):
    """
    Fetch a row, packing the key according to the column type.

    Integer columns (or as_int) send the key as a 4-byte integer; all other
    columns send it as UTF-8 text.
    """
    table_entry = client.get_table_id(table)
    column_id = client.get_column_id(table_entry, column)
    index = next(i for i in table_entry.indexes if i.column == column)

    if as_int or index.type == IndexType.INT:
        try:
            number = int(key)
        except ValueError:
            raise ConfigurationError(f"Column '{column}' expects an integer key, got '{key}'") from None
        return client.fetch_by_int(table_entry.id, column_id, number)
    return client.fetch_by_string(table_entry.id, column_id, key)


def format_tables(client: MelianClient) -> str:
    """Render the schema as one line per table."""
    lines = []
    for table in client.schema.tables:
        columns = ", ".join(f"{i.column}#{i.id}:{i.type.value}" for i in table.indexes)
        lines.append(f"{table.name}#{table.id} (every {table.period}s): {columns}")
    return "\n".join(lines) if lines else "(no tables)"


def run_shell(client: MelianClient) -> None:
    """Interactive read-fetch-print loop."""
    # Enable command history with arrow keys (works on Unix systems)
    try:
        import readline  # noqa: F401
    except ImportError:
        pass  # readline not available on Windows by default

    print(f"Melian Client")
    print(f"=============")
    print(f"Connected to {client.dsn}. Type 'help' for commands.\n")

    while True:
        try:
            line = input("melian> ").strip()
        except EOFError:
            print("\nGoodbye!")
            break
        except KeyboardInterrupt:
            print("\n\nInterrupted. Goodbye!")
            break

        if not line:
            continue

        parts = line.split(maxsplit=3)
        command = parts[0].lower()

        if command in ("exit", "quit"):
            print("Goodbye!")
            break

        if command == "help":
            print(SHELL_HELP)
            continue

        if command == "status":
            status = "Connected" if client.is_connected else "Disconnected"
            print(f"Status: {status}")
            print(f"Server: {client.dsn}")
            continue

        try:
            if command == "reconnect":
                client.disconnect()
                client.connect()
                print("Reconnected!")
            elif command == "tables":
                print(format_tables(client))
            elif command == "describe":
                print(json.dumps(client.describe_schema().to_dict(), indent=2))
            elif command == "fetch" and len(parts) == 4:
                row = fetch_row(client, parts[1], parts[2], parts[3])
                print(json.dumps(row))
            else:
                print("ERROR: invalid command (type 'help')")
        except MelianError as exc:
            print(f"ERROR: {exc}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line client."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    logger.debug(f"Connecting to {args.dsn}")

    try:
        with MelianClient(
            dsn=args.dsn,
            timeout=args.timeout,
            schema_spec=args.schema_spec,
            schema_file=args.schema_file,
        ) as client:
            if args.command == "describe":
                print(json.dumps(client.describe_schema().to_dict(), indent=2))
            elif args.command == "fetch":
                row = fetch_row(client, args.table, args.column, args.key, as_int=args.as_int)
                print(json.dumps(row))
            elif args.command == "shell":
                run_shell(client)
    except MelianError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
