"""
Index suggestion side-channel.

When a link's target lacks some of the source's quals, the valuator cannot
price it locally. It hands a snapshot of the target node to a
SuggestionRequester, which asks the server to suggest a supplemental index:

    POST {base_url}/database/{database}/suggest/
    Content-Type: application/json

    {"qual": {"id": ..., "label": ..., "type": "qual", "quals": [...]}}

Requests are fire-and-forget: the wizard never waits for them and never
reads their response.

Usage:
    from qualwizard.wizard.suggest import HttpSuggestionRequester

    requester = HttpSuggestionRequester("http://powa.example.com")
    wizard = Wizard(datasource, database="prod", requester=requester)
    ...
    requester.close()
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any
from urllib.error import URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from qualwizard.config import Config
from qualwizard.exceptions import SuggestionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuggestionRequest:
    """A request for an index covering the target node's quals."""

    database: str
    qual: dict[str, Any] = field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        return {"qual": self.qual}


class SuggestionRequester(ABC):
    """Capability used by the valuator to ask for index suggestions."""

    @abstractmethod
    def notify(self, request: SuggestionRequest) -> None:
        """
        Submit a suggestion request without waiting for it.

        May raise SuggestionError if the request cannot even be submitted;
        delivery failures are the requester's business.
        """
        ...

    def close(self) -> None:
        """Release resources held by the requester."""


class NullSuggestionRequester(SuggestionRequester):
    """Requester used when suggestions are disabled."""

    def notify(self, request: SuggestionRequest) -> None:
        logger.debug("Suggestions disabled, dropping request for %s", request.qual.get("id"))


class HttpSuggestionRequester(SuggestionRequester):
    """
    POSTs suggestion requests from a small thread pool.

    No retry, no cancellation. Failures are logged at warning level.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        max_workers: int = 4,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="qualwizard-suggest",
        )
        self._closed = False

    def url_for(self, database: str) -> str:
        return f"{self.base_url}/database/{quote(database, safe='')}/suggest/"

    def notify(self, request: SuggestionRequest) -> None:
        self.submit(request)

    def submit(self, request: SuggestionRequest) -> "Future[int | None]":
        """Submit a request and return the future of its HTTP status."""
        if self._closed:
            raise SuggestionError(
                "Suggestion requester is closed",
                url=self.url_for(request.database),
            )
        return self._executor.submit(self._post, request)

    def _post(self, request: SuggestionRequest) -> int | None:
        url = self.url_for(request.database)
        try:
            body = json.dumps(request.payload()).encode("utf-8")
            req = Request(
                url,
                data=body,
                headers={"Content-Type": "application/json"},
                method="POST",
            )
            with urlopen(req, timeout=self.timeout) as resp:
                logger.debug("Suggestion request to %s answered %s", url, resp.status)
                return resp.status
        except (URLError, OSError) as e:
            logger.warning("Suggestion request to %s failed: %s", url, e)
            return None

    def close(self, wait: bool = False) -> None:
        self._closed = True
        self._executor.shutdown(wait=wait)


def requester_from_config(
    config: Config,
    enabled: bool = True,
    base_url: str | None = None,
) -> SuggestionRequester:
    """
    Build the requester the configuration asks for.

    `enabled=False` or `config.suggest_enabled=False` gives a
    NullSuggestionRequester; otherwise requests go to `base_url`, falling
    back to `config.suggest_base_url`.
    """
    if not (enabled and config.suggest_enabled):
        return NullSuggestionRequester()
    return HttpSuggestionRequester(
        base_url or config.suggest_base_url,
        timeout=config.suggest_timeout_seconds,
        max_workers=config.suggest_max_workers,
    )
