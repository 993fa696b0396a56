"""Output renderers for cards, board members and the board listing.

Every output format is a ``Renderer`` subclass registered under its format
name. ``get_card_renderer`` and ``get_member_renderer`` pick one or raise
``InvalidOutputFormatError`` before anything has been written.
"""

from __future__ import annotations

import io
import json
import logging
from abc import ABC, abstractmethod
from typing import IO, Any, Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from tres.config import RuntimeConfig
from tres.exceptions import InvalidOutputFormatError, TrelloAPIError, UnsupportedFormatError
from tres.models import Card, Member
from tres.name_index import NameIndex
from tres.projection import (
    CHECKLISTS_UNAVAILABLE,
    COMMENTS_UNAVAILABLE,
    CardDetails,
    CardProjector,
    MemberProjector,
    escape_newlines,
)

logger = logging.getLogger(__name__)

DIVIDER = "--------"


class Renderer(ABC):
    """Writes a whole result set to an output stream."""

    format_name: str = ""

    def __init__(self, config: RuntimeConfig):
        self.config = config
        self.field_names = config.field_names

    @abstractmethod
    def render(self, records: Sequence[Any], out: IO) -> None: ...


# ===== Cards =====


class CardRenderer(Renderer):
    escape_text = False

    def __init__(
        self, config: RuntimeConfig, index: NameIndex, details: CardDetails | None = None
    ):
        super().__init__(config)
        self.index = index
        self.details = details or CardDetails(None)
        self.projector = CardProjector(
            index, self.details, quote_char=self.quote_char, escape_text=self.escape_text
        )

    @property
    def quote_char(self) -> str:
        return self.config.quote_char

    def wants_comments(self) -> bool:
        return "comments" in self.field_names

    def wants_checklists(self) -> bool:
        return "checklistitems" in self.field_names

    def prefetch(self, cards: Sequence[Card]) -> None:
        """Fetch the comments/checklists this renderer will need, possibly in parallel."""
        self.details.prefetch(
            cards,
            comments=self.wants_comments(),
            checklists=self.wants_checklists(),
            max_workers=self.config.workers,
        )


class CardTextRenderer(CardRenderer):
    format_name = "text"

    def wants_checklists(self) -> bool:
        return True

    def render(self, records: Sequence[Card], out: IO) -> None:
        out.write(f"Found {len(records)} cards\n\n")
        for row, card in enumerate(records):
            if self.config.number:
                out.write(f"{row:4d} ")
            values = self.projector.project(card, self.field_names)
            for name, value in zip(self.field_names, values):
                out.write(f"{name.title():<25}: ")
                if name == "comments":
                    out.write("\n")
                out.write(f"{value}\n")
            if card.badges.check_items > 0:
                self._render_checklists(card, out)
            out.write(f"{DIVIDER}\n")

    def _render_checklists(self, card: Card, out: IO) -> None:
        try:
            checklists = self.details.checklists(card)
        except TrelloAPIError as e:
            out.write(f"{CHECKLISTS_UNAVAILABLE} {e}\n")
            return
        out.write("Checklists\n")
        for checklist in checklists:
            out.write(f"{checklist.name}\n")
            for position, item in enumerate(checklist.check_items, 1):
                line = f"{position:2d}: {item.name} "
                if item.complete:
                    line += " ✅ (done)"
                out.write(f"{line}\n")
        out.write("\n")


class CardCsvRenderer(CardRenderer):
    format_name = "csv"
    escape_text = True

    def render(self, records: Sequence[Card], out: IO) -> None:
        sep = self.config.col_sep
        out.write(sep.join(self.config.header_names) + "\n")
        for card in records:
            out.write(sep.join(self.projector.project(card, self.field_names)))
            out.write(self.config.row_sep)


class CardJsonRenderer(CardRenderer):
    """Dumps the cards as Trello returned them; the field list is not used."""

    format_name = "json"

    def wants_comments(self) -> bool:
        return False

    def wants_checklists(self) -> bool:
        return False

    def render(self, records: Sequence[Card], out: IO) -> None:
        out.write(json.dumps([card.raw for card in records], ensure_ascii=False))
        out.write(self.config.row_sep)


class CardMarkdownRenderer(CardRenderer):
    format_name = "markdown"

    def wants_comments(self) -> bool:
        return True

    def wants_checklists(self) -> bool:
        return True

    def render(self, records: Sequence[Card], out: IO) -> None:
        for card in records:
            out.write("\n".join(self.card_lines(card)))
            out.write(self.config.row_sep)

    def card_lines(self, card: Card) -> list[str]:
        lines = [f"# {card.name.strip()}"]
        badges = ""
        for label in card.labels:
            name = label.name or f"[{label.color.upper()}]"
            badges += f'<span style="background-color: {label.color};">{name}</span> '
        lines += [badges, "", "## Description", escape_newlines(card.desc)]

        if card.badges.comments > 0:
            try:
                comments = self.details.comments(card)
            except TrelloAPIError as e:
                lines.append(f"{COMMENTS_UNAVAILABLE} {e}")
            else:
                lines += ["", "## Card Comments"]
                for comment in comments:
                    lines += ["", f"### {comment.date} from @{comment.username}", ""]
                    lines += [comment.text, ""]

        if card.badges.check_items > 0:
            try:
                checklists = self.details.checklists(card)
            except TrelloAPIError as e:
                lines.append(f"{CHECKLISTS_UNAVAILABLE} {e}")
            else:
                lines += ["", "## Checklists"]
                for checklist in checklists:
                    lines.append(f"### {checklist.name}")
                    for item in checklist.check_items:
                        line = f" 1. {item.name}"
                        if item.complete:
                            line += " &#x2705; (done)"
                        lines.append(line)
                lines.append("")

        board_name = self.index.board_name(card.id_board)
        lines.append("## Card Info")
        lines.append(f" * last activity on {card.date_last_activity}")
        if card.due:
            lines.append(f" * due on {card.due}")
        lines.append(f" * card shortUrl [{card.short_url}]({card.short_url})")
        lines.append(f" * board {board_name}")
        lines.append(f" * list {self.index.list_name(card.id_board, card.id_list)}")
        lines += ["", ""]
        return lines


class SpreadsheetMixin:
    """Builds a one-sheet workbook and writes its bytes to the (binary) stream."""

    config: RuntimeConfig
    field_names: list[str]
    default_header = False

    @property
    def quote_char(self) -> str:
        # cell boundaries already delimit values
        return ""

    @property
    def include_header(self) -> bool:
        if self.config.include_header is None:
            return self.default_header
        return self.config.include_header

    def write_workbook(self, rows: list[list[str]], out: IO) -> None:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Sheet1"
        if self.include_header:
            sheet.append([name.title() for name in self.field_names])
        for row in rows:
            sheet.append([ILLEGAL_CHARACTERS_RE.sub("", value) for value in row])

        buffer = io.BytesIO()
        workbook.save(buffer)
        stream = getattr(out, "buffer", out)
        if stream is not out:
            out.flush()
        stream.write(buffer.getvalue())
        stream.flush()


class CardSpreadsheetRenderer(SpreadsheetMixin, CardRenderer):
    format_name = "excel"

    def render(self, records: Sequence[Card], out: IO) -> None:
        rows = [self.projector.project(card, self.field_names) for card in records]
        self.write_workbook(rows, out)


# ===== Members =====


class MemberRenderer(Renderer):
    def __init__(self, config: RuntimeConfig):
        super().__init__(config)
        self.projector = MemberProjector(quote_char=self.quote_char)

    @property
    def quote_char(self) -> str:
        return self.config.quote_char


class MemberTextRenderer(MemberRenderer):
    format_name = "text"

    def render(self, records: Sequence[Member], out: IO) -> None:
        out.write(f"Found {len(records)} members\n\n")
        for row, member in enumerate(records):
            if self.config.number:
                out.write(f"{row:4d}\n")
            values = self.projector.project(member, self.field_names)
            for name, value in zip(self.field_names, values):
                out.write(f"{name:<20} : {value}\n")
            out.write(DIVIDER)
            out.write(self.config.row_sep)


class MemberCsvRenderer(MemberRenderer):
    format_name = "csv"

    def render(self, records: Sequence[Member], out: IO) -> None:
        sep = self.config.col_sep
        out.write(sep.join(self.config.header_names) + "\n")
        for member in records:
            out.write(sep.join(self.projector.project(member, self.field_names)))
            out.write(self.config.row_sep)


class MemberJsonRenderer(MemberRenderer):
    format_name = "json"

    def render(self, records: Sequence[Member], out: IO) -> None:
        out.write(json.dumps([member.raw for member in records], ensure_ascii=False))
        out.write(self.config.row_sep)


class MemberMarkdownRenderer(MemberRenderer):
    format_name = "markdown"

    def render(self, records: Sequence[Member], out: IO) -> None:
        for member in records:
            out.write(f"## {member.full_name}\n\n")
            values = self.projector.project(member, self.field_names)
            for name, value in zip(self.field_names, values):
                out.write(f" * {name.title()}: {value}\n")
            out.write(self.config.row_sep)


class MemberSpreadsheetRenderer(SpreadsheetMixin, MemberRenderer):
    format_name = "excel"
    default_header = True

    def render(self, records: Sequence[Member], out: IO) -> None:
        rows = [self.projector.project(member, self.field_names) for member in records]
        self.write_workbook(rows, out)


# ===== Registry =====

SPREADSHEET_ALIASES = ("excel", "spreadsheet")

CARD_RENDERERS: dict[str, type[CardRenderer]] = {
    "text": CardTextRenderer,
    "csv": CardCsvRenderer,
    "json": CardJsonRenderer,
    "markdown": CardMarkdownRenderer,
    **{alias: CardSpreadsheetRenderer for alias in SPREADSHEET_ALIASES},
}

MEMBER_RENDERERS: dict[str, type[MemberRenderer]] = {
    "text": MemberTextRenderer,
    "csv": MemberCsvRenderer,
    "json": MemberJsonRenderer,
    "markdown": MemberMarkdownRenderer,
    **{alias: MemberSpreadsheetRenderer for alias in SPREADSHEET_ALIASES},
}

BOARD_FORMATS = ("text", "csv")


def _format_key(config: RuntimeConfig) -> str:
    return config.format.strip().lower()


def get_card_renderer(
    config: RuntimeConfig, index: NameIndex, details: CardDetails | None = None
) -> CardRenderer:
    """Pick the card renderer for ``config.format``.

    Raises:
        InvalidOutputFormatError: If no renderer exists for the format
    """
    renderer_class = CARD_RENDERERS.get(_format_key(config))
    if renderer_class is None:
        raise InvalidOutputFormatError(config.format)
    return renderer_class(config, index, details)


def get_member_renderer(config: RuntimeConfig) -> MemberRenderer:
    """Pick the member renderer for ``config.format``.

    Raises:
        InvalidOutputFormatError: If no renderer exists for the format
    """
    renderer_class = MEMBER_RENDERERS.get(_format_key(config))
    if renderer_class is None:
        raise InvalidOutputFormatError(config.format)
    return renderer_class(config)


def render_boards(index: NameIndex, config: RuntimeConfig, out: IO) -> None:
    """Print every board with its lists as ``Board<sep>name<sep>id`` / ``List<sep>name<sep>id`` lines.

    Raises:
        UnsupportedFormatError: For json, markdown and spreadsheet output
        InvalidOutputFormatError: For format names tres does not know at all
    """
    key = _format_key(config)
    if key not in BOARD_FORMATS:
        if key in CARD_RENDERERS:
            raise UnsupportedFormatError(config.format, "boards")
        raise InvalidOutputFormatError(config.format)

    sep = config.col_sep
    for board in index.boards:
        out.write(f"Board{sep}{board.name}{sep}{board.id}\n")
        for entry in index.lists_for(board.name):
            out.write(f"List{sep}{entry.name}{sep}{entry.id}\n")
        out.write("\n")
