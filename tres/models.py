"""Record types for the Trello entities tres reads.

Records are built from the API's JSON with ``from_api`` and keep the
decoded mapping in ``raw`` so the JSON output can reproduce it verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _str_list(data: dict, key: str) -> list[str]:
    return [str(v) for v in data.get(key) or []]


@dataclass(frozen=True)
class NamedEntity:
    """A board or a list: just an id and a human-readable name."""

    id: str
    name: str
    id_board: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> NamedEntity:
        return cls(id=_str(data, "id"), name=_str(data, "name"), id_board=_str(data, "idBoard"))


@dataclass(frozen=True)
class Label:
    id: str
    id_board: str
    name: str
    color: str

    @property
    def display_name(self) -> str:
        """Label name, or the color in upper case for unnamed labels."""
        return self.name or self.color.upper()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Label:
        return cls(
            id=_str(data, "id"),
            id_board=_str(data, "idBoard"),
            name=_str(data, "name"),
            color=_str(data, "color"),
        )


@dataclass(frozen=True)
class Badges:
    """Aggregate counters Trello attaches to every card."""

    attachments: int = 0
    check_items: int = 0
    check_items_checked: int = 0
    comments: int = 0
    description: bool = False
    subscribed: bool = False
    votes: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> Badges:
        if not data:
            return cls()
        return cls(
            attachments=int(data.get("attachments") or 0),
            check_items=int(data.get("checkItems") or 0),
            check_items_checked=int(data.get("checkItemsChecked") or 0),
            comments=int(data.get("comments") or 0),
            description=bool(data.get("description")),
            subscribed=bool(data.get("subscribed")),
            votes=int(data.get("votes") or 0),
        )


@dataclass(frozen=True)
class Card:
    """A card as returned by the search endpoint (``card_fields=all``)."""

    id: str
    name: str
    desc: str = ""
    closed: bool = False
    due: str = ""
    date_last_activity: str = ""
    email: str = ""
    id_board: str = ""
    id_list: str = ""
    id_short: int = 0
    id_attachment_cover: str = ""
    id_checklists: list[str] = field(default_factory=list)
    id_labels: list[str] = field(default_factory=list)
    id_members: list[str] = field(default_factory=list)
    id_members_voted: list[str] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    pos: float = 0.0
    short_link: str = ""
    short_url: str = ""
    url: str = ""
    subscribed: bool = False
    badges: Badges = field(default_factory=Badges)
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Card:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            desc=_str(data, "desc"),
            closed=bool(data.get("closed")),
            due=_str(data, "due"),
            date_last_activity=_str(data, "dateLastActivity"),
            email=_str(data, "email"),
            id_board=_str(data, "idBoard"),
            id_list=_str(data, "idList"),
            id_short=int(data.get("idShort") or 0),
            id_attachment_cover=_str(data, "idAttachmentCover"),
            id_checklists=_str_list(data, "idChecklists"),
            id_labels=_str_list(data, "idLabels"),
            id_members=_str_list(data, "idMembers"),
            id_members_voted=_str_list(data, "idMembersVoted"),
            labels=[Label.from_api(label) for label in data.get("labels") or []],
            pos=float(data.get("pos") or 0.0),
            short_link=_str(data, "shortLink"),
            short_url=_str(data, "shortUrl"),
            url=_str(data, "url"),
            subscribed=bool(data.get("subscribed")),
            badges=Badges.from_api(data.get("badges")),
            raw=data,
        )


@dataclass(frozen=True)
class Member:
    id: str
    username: str = ""
    full_name: str = ""
    bio: str = ""
    confirmed: bool = False
    avatar_hash: str = ""
    initials: str = ""
    member_type: str = ""
    status: str = ""
    url: str = ""
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Member:
        return cls(
            id=_str(data, "id"),
            username=_str(data, "username"),
            full_name=_str(data, "fullName"),
            bio=_str(data, "bio"),
            confirmed=bool(data.get("confirmed")),
            avatar_hash=_str(data, "avatarHash"),
            initials=_str(data, "initials"),
            member_type=_str(data, "memberType"),
            status=_str(data, "status"),
            url=_str(data, "url"),
            raw=data,
        )


@dataclass(frozen=True)
class Comment:
    """A ``commentCard`` action on a card."""

    id: str
    date: str
    text: str
    username: str
    full_name: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Comment:
        creator = data.get("memberCreator") or {}
        return cls(
            id=_str(data, "id"),
            date=_str(data, "date"),
            text=_str(data.get("data") or {}, "text"),
            username=_str(creator, "username"),
            full_name=_str(creator, "fullName"),
        )


@dataclass(frozen=True)
class CheckItem:
    id: str
    name: str
    state: str = "incomplete"
    pos: float = 0.0

    @property
    def complete(self) -> bool:
        return self.state == "complete"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CheckItem:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            state=_str(data, "state") or "incomplete",
            pos=float(data.get("pos") or 0.0),
        )


@dataclass(frozen=True)
class Checklist:
    id: str
    name: str
    id_board: str = ""
    id_card: str = ""
    check_items: list[CheckItem] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Checklist:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            id_board=_str(data, "idBoard"),
            id_card=_str(data, "idCard"),
            check_items=[CheckItem.from_api(item) for item in data.get("checkItems") or []],
        )
