"""Field projection: turn a card or member into one string per requested field.

Each field name maps to an extraction function in ``CARD_FIELDS`` or
``MEMBER_FIELDS``. Unknown names yield an empty string. Card fields that need
more than the card itself (comments, checklists) go through ``CardDetails``,
which fetches them at most once per card and can prefetch them in parallel.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Callable, Iterable

from tres.exceptions import TrelloAPIError
from tres.models import Card, Checklist, Comment, Member
from tres.name_index import NameIndex

if TYPE_CHECKING:
    from tres.trello_client import TrelloClient

logger = logging.getLogger(__name__)

COMMENTS_UNAVAILABLE = "[Could not read comments for card]"
CHECKLISTS_UNAVAILABLE = "[Could not read checklist items for card]"


def escape_newlines(text: str) -> str:
    """Replace each newline with the two characters backslash and n."""
    return text.replace("\n", "\\n")


def _bool(value: bool) -> str:
    return "true" if value else "false"


class CardDetails:
    """Comments and checklists of cards, fetched lazily and kept for one render pass.

    A failed fetch is remembered too, so every consumer of the same card sees
    the same error instead of triggering another request.
    """

    def __init__(self, client: TrelloClient | None):
        self.client = client
        self._comments: dict[str, list[Comment] | TrelloAPIError] = {}
        self._checklists: dict[str, list[Checklist] | TrelloAPIError] = {}
        self._lock = threading.Lock()

    def _load(self, store: dict, card_id: str, fetch: Callable[[str], list]) -> list:
        with self._lock:
            cached = store.get(card_id)
        if cached is None:
            try:
                cached = fetch(card_id)
            except TrelloAPIError as e:
                logger.warning("Could not fetch details for card %s: %s", card_id, e)
                cached = e
            with self._lock:
                store[card_id] = cached
        if isinstance(cached, TrelloAPIError):
            raise cached
        return cached

    def comments(self, card: Card) -> list[Comment]:
        """Comments of ``card``; an empty list without a request when the badge says none.

        Raises:
            TrelloAPIError: If the comments could not be fetched
        """
        if card.badges.comments <= 0 or self.client is None:
            return []
        return self._load(self._comments, card.id, self.client.card_comments)

    def checklists(self, card: Card) -> list[Checklist]:
        """Checklists of ``card``; an empty list without a request when it has no check items.

        Raises:
            TrelloAPIError: If the checklists could not be fetched
        """
        if card.badges.check_items <= 0 or self.client is None:
            return []
        return self._load(self._checklists, card.id, self.client.card_checklists)

    def prefetch(
        self,
        cards: Iterable[Card],
        comments: bool = False,
        checklists: bool = False,
        max_workers: int = 1,
    ) -> None:
        """Fetch details for many cards up front.

        With ``max_workers`` > 1 the requests run on a thread pool. Failures
        are stored, not raised; rendering reports them per card later.
        """
        jobs: list[Callable[[Card], object]] = []
        if comments:
            jobs.append(self.comments)
        if checklists:
            jobs.append(self.checklists)
        tasks = [(job, card) for card in cards for job in jobs]
        if not tasks:
            return

        def run(job: Callable[[Card], object], card: Card) -> None:
            try:
                job(card)
            except TrelloAPIError:
                pass  # stored by _load, reported while rendering

        if max_workers <= 1:
            for job, card in tasks:
                run(job, card)
            return

        logger.info("Prefetching details for %d cards with %d workers", len(tasks), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for future in [executor.submit(run, job, card) for job, card in tasks]:
                future.result()


def format_comments(comments: list[Comment]) -> str:
    return "".join(
        f"@{comment.username} on {comment.date}: {escape_newlines(comment.text)}\n"
        for comment in comments
    )


def format_checklist_items(checklists: list[Checklist]) -> str:
    lines = []
    for checklist in checklists:
        for position, item in enumerate(checklist.check_items, 1):
            line = f"{checklist.name}: {position}. {item.name}"
            if item.complete:
                line += " (done)"
            lines.append(line + "\n")
    return "".join(lines)


class CardProjector:
    """Projects cards; cross-references resolve through a ``NameIndex``."""

    def __init__(
        self,
        index: NameIndex,
        details: CardDetails | None = None,
        quote_char: str = "",
        escape_text: bool = False,
    ):
        self.index = index
        self.details = details or CardDetails(None)
        self.quote_char = quote_char
        self.escape_text = escape_text

    def project(self, card: Card, field_names: list[str]) -> list[str]:
        """One string per field name, in the same order."""
        result = []
        for name in field_names:
            extract = CARD_FIELDS.get(name.strip().lower())
            item = extract(card, self) if extract else ""
            if self.quote_char:
                item = f"{self.quote_char}{item}{self.quote_char}"
            result.append(item)
        return result

    def comments_text(self, card: Card) -> str:
        try:
            return format_comments(self.details.comments(card))
        except TrelloAPIError as e:
            return f"{COMMENTS_UNAVAILABLE} {e}"

    def checklist_items_text(self, card: Card) -> str:
        try:
            return format_checklist_items(self.details.checklists(card))
        except TrelloAPIError as e:
            return f"{CHECKLISTS_UNAVAILABLE} {e}"


class MemberProjector:
    """Projects board members. ``bio`` always has its newlines escaped."""

    def __init__(self, quote_char: str = ""):
        self.quote_char = quote_char

    def project(self, member: Member, field_names: list[str]) -> list[str]:
        result = []
        for name in field_names:
            extract = MEMBER_FIELDS.get(name.strip().lower())
            item = extract(member) if extract else ""
            if self.quote_char:
                item = f"{self.quote_char}{item}{self.quote_char}"
            result.append(item)
        return result


def _labels(card: Card) -> str:
    return " ".join(f"[{label.display_name}]" for label in card.labels)


def _label_colors(card: Card) -> str:
    return " ".join(f"[{label.color.upper()}]" for label in card.labels)


def _desc(card: Card, projector: CardProjector) -> str:
    return escape_newlines(card.desc) if projector.escape_text else card.desc


CARD_FIELDS: dict[str, Callable[[Card, CardProjector], str]] = {
    "id": lambda card, p: card.id,
    "attachmentcount": lambda card, p: str(card.badges.attachments),
    "checked": lambda card, p: f"{card.badges.check_items_checked}/{card.badges.check_items}",
    "commentcount": lambda card, p: str(card.badges.comments),
    "hasdesc": lambda card, p: _bool(card.badges.description),
    "closed": lambda card, p: _bool(card.closed),
    "datelastactivity": lambda card, p: card.date_last_activity,
    "desc": _desc,
    "due": lambda card, p: card.due,
    "email": lambda card, p: card.email,
    "idattachmentcover": lambda card, p: card.id_attachment_cover,
    "idboard": lambda card, p: card.id_board,
    "idchecklists": lambda card, p: ",".join(card.id_checklists),
    "idlabels": lambda card, p: ",".join(card.id_labels),
    "idlist": lambda card, p: card.id_list,
    "idmembers": lambda card, p: ",".join(card.id_members),
    "idmembersvoted": lambda card, p: ",".join(card.id_members_voted),
    "idshort": lambda card, p: str(card.id_short),
    "labels": lambda card, p: _labels(card),
    "labelcolors": lambda card, p: _label_colors(card),
    "listname": lambda card, p: p.index.list_name(card.id_board, card.id_list),
    "boardname": lambda card, p: p.index.board_name(card.id_board),
    "name": lambda card, p: card.name,
    "pos": lambda card, p: f"{card.pos:.2g}",
    "shortlink": lambda card, p: card.short_link,
    "shorturl": lambda card, p: card.short_url,
    "subscribed": lambda card, p: _bool(card.subscribed),
    "url": lambda card, p: card.url,
    "comments": lambda card, p: p.comments_text(card),
    "checklistitems": lambda card, p: p.checklist_items_text(card),
}

MEMBER_FIELDS: dict[str, Callable[[Member], str]] = {
    "id": lambda member: member.id,
    "idmember": lambda member: member.id,
    "url": lambda member: member.url,
    "avatarhash": lambda member: member.avatar_hash,
    "bio": lambda member: escape_newlines(member.bio),
    "confirmed": lambda member: _bool(member.confirmed),
    "fullname": lambda member: member.full_name,
    "initials": lambda member: member.initials,
    "membertype": lambda member: member.member_type,
    "status": lambda member: member.status,
    "name": lambda member: member.username,
}
