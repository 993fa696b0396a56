"""Runtime settings and credentials."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from tres.exceptions import ConfigurationError

DEFAULT_FIELDS = "name"
DEFAULT_FORMAT = "text"
DEFAULT_LIMIT = 200

_ESCAPES = {"\\t": "\t", "\\n": "\n", "\\r": "\r"}


def unescape_separator(value: str) -> str:
    """Turn literal ``\\t``, ``\\n`` and ``\\r`` typed on a command line into the real characters."""
    for escaped, char in _ESCAPES.items():
        value = value.replace(escaped, char)
    return value


def parse_field_names(fields: str) -> list[str]:
    """Split a comma-separated field list; names are trimmed and lowercased, order kept."""
    return [name.strip().lower() for name in fields.split(",")]


@dataclass(frozen=True)
class RuntimeConfig:
    """Settings that shape one run's output.

    Instances are immutable; query directives derive a new one with
    :meth:`with_changes` instead of editing shared state.

    ``include_header`` only affects spreadsheet output. ``None`` keeps the
    per-record-kind default (header row for members, none for cards).
    """

    col_sep: str = "\t"
    row_sep: str = "\n"
    quote_char: str = ""
    fields: str = DEFAULT_FIELDS
    format: str = DEFAULT_FORMAT
    limit: int = DEFAULT_LIMIT
    number: bool = False
    include_header: bool | None = None
    workers: int = 1

    @property
    def field_names(self) -> list[str]:
        return parse_field_names(self.fields)

    @property
    def header_names(self) -> list[str]:
        """Field names exactly as given, for header lines."""
        return self.fields.split(",")

    def with_changes(self, **changes: object) -> RuntimeConfig:
        return replace(self, **changes)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Credentials:
    api_key: str
    token: str
    user: str = "me"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Credentials:
        """Read TRELLO_KEY (or TRELLO_API_KEY), TRELLO_TOKEN and optional TRELLO_USER.

        Raises:
            ConfigurationError: If key or token is missing
        """
        env = os.environ if environ is None else environ
        api_key = env.get("TRELLO_KEY") or env.get("TRELLO_API_KEY")
        token = env.get("TRELLO_TOKEN")
        if not api_key:
            raise ConfigurationError("TRELLO_KEY environment variable not set, exiting.")
        if not token:
            raise ConfigurationError("TRELLO_TOKEN environment variable not set, exiting.")
        return cls(api_key=api_key.strip(), token=token.strip(), user=env.get("TRELLO_USER") or "me")


def load_env_file(path: str | Path) -> bool:
    """Load KEY=VALUE lines from ``path`` into ``os.environ``.

    Variables that are already set are left alone. Returns False when the
    file does not exist.
    """
    env_path = Path(path)
    if not env_path.is_file():
        return False
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                if key not in os.environ:
                    os.environ[key] = value.strip().strip("'\"")
    return True
