"""CLI entry point for tres."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import IO, Callable

from tres.config import (
    DEFAULT_FIELDS,
    DEFAULT_FORMAT,
    DEFAULT_LIMIT,
    Credentials,
    RuntimeConfig,
    load_env_file,
    unescape_separator,
)
from tres.exceptions import TrelloAPIError, TresError, UnknownCommandError
from tres.logging_config import setup_logging
from tres.name_index import NameIndex
from tres.projection import CARD_FIELDS, CardDetails
from tres.query import read_query
from tres.renderers import get_card_renderer, get_member_renderer, render_boards
from tres.trello_client import TrelloClient

logger = logging.getLogger("tres.cli")

DESCRIPTION = """
tres -- Trello search for the command line

Commands:
    search 'query' | <filename>
                        search cards on all boards; a query file may hold
                        several lines, // comments and @directives
                        (@fields, @format, @colsep, @rowsep, @limit)
    members "<board>"   list the members of a board
    boards              list board name/id and list name/id for each board
    createlist "<board>" "<list>"
                        create a new list on a board
"""


def _field_table() -> str:
    names = sorted(CARD_FIELDS)
    rows = [names[i : i + 3] for i in range(0, len(names), 3)]
    return "\n".join("    " + "".join(f"{name:<20}" for name in row) for row in rows)


EPILOG = f"""
Card field names:
{_field_table()}

Member field names:
    id  url  avatarhash  bio  confirmed  fullname  initials  membertype  status  name

Environment:
    TRELLO_KEY          your Trello API key (TRELLO_API_KEY also works)
    TRELLO_TOKEN        your Trello API token
    TRELLO_USER         optional (defaults to "me"), your Trello user name
    TRES_ENV_FILE       optional .env file to load (defaults to ./.env)

If anything goes wrong, tres exits with a return code of 1.
"""


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tres",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", nargs="?", help="search, members, boards or createlist")
    parser.add_argument("args", nargs="*", help="command arguments")
    parser.add_argument("--colsep", default="\t", help="column separator (default: tab)")
    parser.add_argument("--rowsep", default="\n", help="row separator (default: newline)")
    parser.add_argument("--quotechar", default="", help="quote string wrapped around every value")
    parser.add_argument("--fields", default=DEFAULT_FIELDS, help="comma-separated field names")
    parser.add_argument(
        "--format",
        default=DEFAULT_FORMAT,
        help="output format: text|csv|json|markdown|excel (default: text)",
    )
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT, help="maximum number of cards")
    parser.add_argument("--number", action="store_true", help="number the output records")
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=1,
        help="fetch comments/checklists with N parallel requests (default: 1)",
    )
    parser.add_argument(
        "--sheet-header",
        choices=("auto", "on", "off"),
        default="auto",
        help="header row in excel output (auto: members yes, cards no)",
    )
    parser.add_argument(
        "--position", default="bottom", help="position of a new list: top|bottom|<number>"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="only log errors")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", help="also write the log to this file")
    return parser


def config_from_args(args: argparse.Namespace) -> RuntimeConfig:
    include_header = {"auto": None, "on": True, "off": False}[args.sheet_header]
    return RuntimeConfig(
        col_sep=unescape_separator(args.colsep),
        row_sep=unescape_separator(args.rowsep),
        quote_char=args.quotechar,
        fields=args.fields,
        format=args.format,
        limit=args.limit,
        number=args.number,
        include_header=include_header,
        workers=args.workers,
    )


def _last_argument(args: argparse.Namespace, what: str) -> str:
    if not args.args:
        raise TresError(f"{args.command} requires {what}")
    return args.args[-1]


def cmd_search(
    client: TrelloClient, index: NameIndex, config: RuntimeConfig, args: argparse.Namespace, out: IO
) -> None:
    query, config = read_query(_last_argument(args, "a query or a query file"), config)
    renderer = get_card_renderer(config, index, CardDetails(client))
    logger.info("Searching for %r (limit %d)", query, config.limit)
    cards = client.search_cards(query, config.limit)
    renderer.prefetch(cards)
    renderer.render(cards, out)


def cmd_members(
    client: TrelloClient, index: NameIndex, config: RuntimeConfig, args: argparse.Namespace, out: IO
) -> None:
    board_name = _last_argument(args, "a board name")
    renderer = get_member_renderer(config)
    board_id = index.board_id(board_name)
    if not board_id:
        raise TresError(f"Board not found: {board_name}")
    renderer.render(client.board_members(board_id), out)


def cmd_boards(
    client: TrelloClient, index: NameIndex, config: RuntimeConfig, args: argparse.Namespace, out: IO
) -> None:
    render_boards(index, config, out)


def cmd_createlist(
    client: TrelloClient, index: NameIndex, config: RuntimeConfig, args: argparse.Namespace, out: IO
) -> None:
    if len(args.args) < 2:
        raise TresError("createlist requires a board name and a list name")
    board_name, list_name = args.args[-2], args.args[-1]
    board_id = index.board_id(board_name)
    if not board_id:
        raise TresError(f"Board not found: {board_name}")
    created = client.create_list(board_id, list_name, args.position)
    logger.info("Created list %s on %s", created.name, board_name)
    out.write(f"List{config.col_sep}{created.name}{config.col_sep}{created.id}\n")


Command = Callable[[TrelloClient, NameIndex, RuntimeConfig, argparse.Namespace, IO], None]

COMMANDS: dict[str, Command] = {
    "search": cmd_search,
    "members": cmd_members,
    "boards": cmd_boards,
    "createlist": cmd_createlist,
}


def _log_level(args: argparse.Namespace) -> str:
    if args.verbose:
        return "DEBUG"
    if args.quiet:
        return "ERROR"
    if args.log_level:
        return args.log_level.upper()
    return "WARNING"


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(_log_level(args), args.log_file)
    load_env_file(os.getenv("TRES_ENV_FILE", ".env"))

    try:
        command = COMMANDS.get(args.command.strip().lower())
        if command is None:
            raise UnknownCommandError(args.command)

        credentials = Credentials.from_env()
        client = TrelloClient(credentials.api_key, credentials.token)
        index = NameIndex.build(client, credentials.user)
        command(client, index, config_from_args(args), args, sys.stdout)
    except (TresError, TrelloAPIError) as e:
        logger.error(str(e))
        sys.exit(1)
    except OSError as e:
        logger.error(f"I/O error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
