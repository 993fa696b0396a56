"""
Shared pytest fixtures for tres tests
"""
import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tres.models import Card, Checklist, Comment, Member, NamedEntity
from tres.name_index import NameIndex
from tres.trello_client import TrelloClient


def _load(path: Path):
    with open(path) as f:
        return json.load(f)


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory"""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def search_fixture(fixtures_dir):
    """Raw /search response with two cards"""
    return _load(fixtures_dir / "search_cards.json")


@pytest.fixture
def cards(search_fixture):
    return [Card.from_api(card) for card in search_fixture["cards"]]


@pytest.fixture
def comments(fixtures_dir):
    return [Comment.from_api(item) for item in _load(fixtures_dir / "comments.json")]


@pytest.fixture
def checklists(fixtures_dir):
    return [Checklist.from_api(item) for item in _load(fixtures_dir / "checklists.json")]


@pytest.fixture
def members(fixtures_dir):
    return [Member.from_api(item) for item in _load(fixtures_dir / "members.json")]


@pytest.fixture
def boards_fixture(fixtures_dir):
    return _load(fixtures_dir / "boards.json")


@pytest.fixture
def mock_client(boards_fixture, comments, checklists, members, cards):
    """TrelloClient double answering from the JSON fixtures"""
    client = MagicMock(spec=TrelloClient)
    client.board_names.return_value = [
        NamedEntity.from_api(board) for board in boards_fixture["boards"]
    ]
    client.list_names.side_effect = lambda board_id: [
        NamedEntity.from_api(entry) for entry in boards_fixture["lists"].get(board_id, [])
    ]
    client.card_comments.return_value = comments
    client.card_checklists.return_value = checklists
    client.board_members.return_value = members
    client.search_cards.return_value = cards
    return client


@pytest.fixture
def name_index(mock_client):
    """NameIndex for boards 'Product' and 'Engineering'"""
    return NameIndex.build(mock_client)
