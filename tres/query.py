"""Search query preprocessing.

A query may span several lines and may come from a file. ``//`` starts a
comment, blank lines are dropped, and lines beginning with ``@`` are
directives that override output settings::

    @fields name,listname,due
    @format csv
    board:Sprint is:open   // only open cards
    @limit 50

Directives are applied in order, later ones win, and they never become
part of the query text.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from tres.config import RuntimeConfig, unescape_separator
from tres.exceptions import QueryDirectiveError, TresError

logger = logging.getLogger(__name__)

COMMENT_MARKER = "//"


def _limit(config: RuntimeConfig, value: str) -> RuntimeConfig:
    try:
        return config.with_changes(limit=int(value))
    except ValueError as e:
        raise QueryDirectiveError("@limit", value) from e


DIRECTIVES: dict[str, Callable[[RuntimeConfig, str], RuntimeConfig]] = {
    "@fields": lambda config, value: config.with_changes(fields=value),
    "@format": lambda config, value: config.with_changes(format=value),
    "@colsep": lambda config, value: config.with_changes(col_sep=unescape_separator(value)),
    "@rowsep": lambda config, value: config.with_changes(row_sep=unescape_separator(value)),
    "@limit": _limit,
}


def apply_directive(line: str, config: RuntimeConfig) -> RuntimeConfig:
    """Return ``config`` updated by one ``@name value`` line.

    Unknown directives are logged and ignored.

    Raises:
        QueryDirectiveError: If the value cannot be used (e.g. ``@limit abc``)
    """
    line = line.lower()
    name, _, value = line.partition(" ")
    handler = DIRECTIVES.get(name)
    if handler is None:
        logger.warning("Ignoring unknown query directive %s", name)
        return config
    return handler(config, value.strip())


def parse_query(text: str, config: RuntimeConfig) -> tuple[str, RuntimeConfig]:
    """Strip comments and directives from ``text``.

    Returns:
        The query (remaining lines, each followed by a space) and the
        config produced by the directives. ``config`` itself is not modified.
    """
    query = ""
    for line in text.split("\n"):
        line = line.strip().split(COMMENT_MARKER)[0].strip()
        if not line:
            continue
        if line.startswith("@"):
            config = apply_directive(line, config)
        else:
            query += line + " "
    return query, config


def load_query(path: str | Path, config: RuntimeConfig) -> tuple[str, RuntimeConfig]:
    """Read a query file and preprocess it."""
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise TresError(f"Could not read query file {path}: {e}") from e
    return parse_query(text, config)


def read_query(argument: str, config: RuntimeConfig) -> tuple[str, RuntimeConfig]:
    """Preprocess the ``search`` argument, reading it as a file when one exists at that path."""
    if os.path.isfile(argument):
        logger.info("Loading query from %s", argument)
        return load_query(argument, config)
    return parse_query(argument, config)
