"""Trello API client with retry logic."""

from __future__ import annotations

import logging
import time
from typing import Any, cast

import requests

from tres.exceptions import (
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)
from tres.models import Card, Checklist, Comment, Member, NamedEntity

logger = logging.getLogger(__name__)

DEFAULT_MEMBER = "me"


class TrelloClient:
    """Authenticated access to the handful of Trello endpoints tres uses.

    Every call carries ``key`` and ``token`` as query parameters. Responses
    with a non-2xx status raise a ``TrelloAPIError`` subclass; transient
    failures (429, 5xx, network errors) are retried with exponential backoff.
    """

    base_url = "https://api.trello.com/1"
    max_retries = 3
    base_delay = 1.0
    retry_statuses = {429, 500, 502, 503, 504}

    def __init__(self, api_key: str, token: str, timeout: float = 30.0):
        self.api_key = api_key
        self.token = token
        self.timeout = timeout

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json_body: dict | None = None,
    ) -> Any:
        """Make authenticated request to Trello API with retry logic"""
        url = f"{self.base_url}/{endpoint.strip('/')}"
        auth_params: dict[str, Any] = {"key": self.api_key, "token": self.token}
        if params:
            auth_params.update(params)

        # Credentials stay out of the log
        logger.debug("%s %s %s", method, url, params or {})

        last_exception: requests.RequestException | None = None
        for attempt in range(self.max_retries):
            try:
                response = requests.request(
                    method, url, params=auth_params, json=json_body, timeout=self.timeout
                )
                response.raise_for_status()
            except requests.HTTPError as e:
                last_exception = e
                status_code = e.response.status_code if e.response is not None else 0
                response_text = e.response.text if e.response is not None else ""

                if status_code not in self.retry_statuses:
                    raise self._error_for_status(endpoint, status_code, response_text) from e

                if attempt < self.max_retries - 1:
                    delay = self.base_delay * (2**attempt)
                    logger.debug("HTTP %s for %s, retrying in %.0fs", status_code, endpoint, delay)
                    time.sleep(delay)

            except requests.RequestException as e:
                last_exception = e
                if attempt < self.max_retries - 1:
                    time.sleep(self.base_delay * (2**attempt))
                else:
                    raise TrelloAPIError(
                        f"Network error after {self.max_retries} attempts: {e}",
                        status_code=None,
                        response_text=None,
                    ) from e
            else:
                return self._decode(response, endpoint)

        # All retries exhausted for transient HTTP errors
        if isinstance(last_exception, requests.HTTPError):
            response = last_exception.response
            status_code = response.status_code if response is not None else 0
            response_text = response.text if response is not None else ""

            if status_code == 429:
                raise TrelloRateLimitError(
                    f"Rate limit exceeded after {self.max_retries} attempts (HTTP 429).\n"
                    "Wait a few minutes and try again.",
                    status_code=status_code,
                    response_text=response_text,
                ) from last_exception
            raise TrelloServerError(
                f"HTTP Status {status_code}: Trello server error persisted after "
                f"{self.max_retries} attempts.",
                status_code=status_code,
                response_text=response_text,
            ) from last_exception

        raise TrelloAPIError(f"Request to {endpoint} failed after {self.max_retries} attempts")

    @staticmethod
    def _decode(response: requests.Response, endpoint: str) -> Any:
        # Malformed bodies are not retried
        try:
            return cast(Any, response.json())
        except ValueError as e:
            raise TrelloAPIError(
                f"HTTP Status {response.status_code}: invalid JSON from {endpoint}: {e}",
                status_code=response.status_code,
                response_text=response.text,
            ) from e

    @staticmethod
    def _error_for_status(endpoint: str, status_code: int, response_text: str) -> TrelloAPIError:
        if status_code == 401:
            return TrelloAuthenticationError(
                "HTTP Status 401: Invalid API credentials. Check TRELLO_KEY and TRELLO_TOKEN.",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 403:
            return TrelloAuthenticationError(
                f"HTTP Status 403: Access forbidden to resource: {endpoint}",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 404:
            return TrelloNotFoundError(
                f"HTTP Status 404: Resource not found: {endpoint}",
                status_code=status_code,
                response_text=response_text,
            )
        return TrelloAPIError(
            f"HTTP Status {status_code} for {endpoint}: {response_text[:200]}",
            status_code=status_code,
            response_text=response_text,
        )

    def get(self, endpoint: str, params: dict | None = None) -> Any:
        return self._request("GET", endpoint, params=params)

    def post(self, endpoint: str, body: dict, params: dict | None = None) -> Any:
        return self._request("POST", endpoint, params=params, json_body=body)

    def board_names(self, member: str = DEFAULT_MEMBER) -> list[NamedEntity]:
        """Boards (id and name) visible to ``member``."""
        data = self.get(f"members/{member.strip()}/boards", {"fields": "name"})
        return [NamedEntity.from_api(item) for item in data]

    def list_names(self, board_id: str) -> list[NamedEntity]:
        data = self.get(f"boards/{board_id.strip()}/lists", {"fields": "name"})
        return [NamedEntity.from_api(item) for item in data]

    def label_names(self, board_id: str) -> list[NamedEntity]:
        data = self.get(f"boards/{board_id.strip()}/labels", {"fields": "name"})
        return [NamedEntity.from_api(item) for item in data]

    def create_list(self, board_id: str, name: str, position: str = "bottom") -> NamedEntity:
        """Create a list on a board. This is the only write tres performs."""
        data = self.post(f"boards/{board_id.strip()}/lists", {"name": name, "pos": position})
        return NamedEntity.from_api(data)

    def board_members(self, board_id: str) -> list[Member]:
        data = self.get(f"boards/{board_id.strip()}/members", {"fields": "all"})
        return [Member.from_api(item) for item in data]

    def card_comments(self, card_id: str) -> list[Comment]:
        data = self.get(f"cards/{card_id.strip()}/actions", {"filter": "commentCard"})
        return [Comment.from_api(item) for item in data]

    def card_checklists(self, card_id: str) -> list[Checklist]:
        data = self.get(f"cards/{card_id.strip()}/checklists", {"fields": "name,idBoard,idCard"})
        return [Checklist.from_api(item) for item in data]

    def search_cards(self, query: str, limit: int) -> list[Card]:
        """Run a Trello search restricted to cards."""
        data = self.get(
            "search",
            {
                "modelTypes": "cards",
                "card_fields": "all",
                "cards_limit": str(limit),
                "query": query,
            },
        )
        return [Card.from_api(item) for item in (data or {}).get("cards") or []]
