"""In-memory id <-> name lookups for boards and their lists."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from tres.models import NamedEntity

if TYPE_CHECKING:
    from tres.trello_client import TrelloClient

logger = logging.getLogger(__name__)


def id_from_name(name: str, entities: Iterable[NamedEntity]) -> str:
    """Return the id of the first entity whose name matches ``name`` ignoring case, or ""."""
    wanted = name.upper()
    for entity in entities:
        if entity.name.upper() == wanted:
            return entity.id
    return ""


def name_from_id(entity_id: str, entities: Iterable[NamedEntity]) -> str:
    """Return the name of the entity with exactly this id, or ""."""
    for entity in entities:
        if entity.id == entity_id:
            return entity.name
    return ""


class NameIndex:
    """Boards plus the lists of every board, keyed by lowercased board name.

    The index is filled once, before any records are rendered. Lookups never
    touch the network and answer "" for anything unknown.
    """

    def __init__(
        self,
        boards: list[NamedEntity] | None = None,
        lists: dict[str, list[NamedEntity]] | None = None,
    ):
        self.boards: list[NamedEntity] = boards or []
        self.lists: dict[str, list[NamedEntity]] = lists or {}

    @classmethod
    def build(cls, client: TrelloClient, member: str = "me") -> NameIndex:
        """Fetch all boards of ``member`` and the lists of each board."""
        boards = client.board_names(member)
        index = cls(boards=boards)
        for board in boards:
            index.lists[board.name.lower()] = list(client.list_names(board.id))
        logger.info("Loaded %d boards for %s", len(boards), member)
        return index

    def board_id(self, board_name: str) -> str:
        return id_from_name(board_name, self.boards)

    def board_name(self, board_id: str) -> str:
        return name_from_id(board_id, self.boards)

    def lists_for(self, board_name: str) -> list[NamedEntity]:
        return self.lists.get(board_name.lower(), [])

    def list_name(self, board_id: str, list_id: str) -> str:
        """Resolve board id -> board name -> that board's lists -> list name."""
        board_name = self.board_name(board_id)
        if not board_name:
            return ""
        return name_from_id(list_id, self.lists_for(board_name))
