"""Trello search for the command line."""

from __future__ import annotations

from tres.cli import main
from tres.config import Credentials, RuntimeConfig
from tres.exceptions import (
    ConfigurationError,
    InvalidOutputFormatError,
    QueryDirectiveError,
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
    TresError,
    UnknownCommandError,
    UnsupportedFormatError,
)
from tres.logging_config import setup_logging
from tres.models import Badges, Card, Checklist, CheckItem, Comment, Label, Member, NamedEntity
from tres.name_index import NameIndex, id_from_name, name_from_id
from tres.projection import CardDetails, CardProjector, MemberProjector
from tres.query import parse_query
from tres.renderers import get_card_renderer, get_member_renderer, render_boards
from tres.trello_client import TrelloClient

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "TrelloClient",
    "NameIndex",
    "CardDetails",
    "CardProjector",
    "MemberProjector",
    "RuntimeConfig",
    "Credentials",
    "id_from_name",
    "name_from_id",
    "parse_query",
    "get_card_renderer",
    "get_member_renderer",
    "render_boards",
    "setup_logging",
    # Records
    "Badges",
    "Card",
    "Checklist",
    "CheckItem",
    "Comment",
    "Label",
    "Member",
    "NamedEntity",
    # Exceptions
    "TrelloAPIError",
    "TrelloAuthenticationError",
    "TrelloNotFoundError",
    "TrelloRateLimitError",
    "TrelloServerError",
    "TresError",
    "ConfigurationError",
    "UnknownCommandError",
    "QueryDirectiveError",
    "InvalidOutputFormatError",
    "UnsupportedFormatError",
    # CLI
    "main",
]
