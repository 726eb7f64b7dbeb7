"""
Link valuation.

A link whose target entirely covers its source is valued at
-overlap_weight * len(overlap): an index for one serves the other, and the
more attributes they share the cheaper the jump.

A link whose target misses some of the source's quals cannot be priced
locally. The valuator asks the suggestion side-channel for an index on the
target and leaves the value unresolved; solvers then price the link with
`link_cost`, which falls back to `config.unresolved_link_value`.
"""

from __future__ import annotations

import logging
from typing import Iterable

from qualwizard.config import Config, get_config
from qualwizard.exceptions import SuggestionError
from qualwizard.wizard.models import Link
from qualwizard.wizard.suggest import (
    NullSuggestionRequester,
    SuggestionRequest,
    SuggestionRequester,
)

logger = logging.getLogger(__name__)


def link_cost(link: Link, config: Config | None = None) -> float:
    """Value of a link, or the unresolved sentinel if it has none yet."""
    if link.value is not None:
        return link.value
    config = config or get_config()
    return config.unresolved_link_value


class LinkValuator:
    """Assigns a value to each link, requesting suggestions when needed."""

    def __init__(
        self,
        database: str,
        requester: SuggestionRequester | None = None,
        config: Config | None = None,
    ) -> None:
        self.database = database
        self.requester = requester or NullSuggestionRequester()
        self.config = config or get_config()
        self.requests_sent = 0

    def value_link(self, link: Link) -> float | None:
        if not link.missing:
            link.value = -self.config.overlap_weight * len(link.overlap)
            return link.value

        request = SuggestionRequest(database=self.database, qual=link.target.snapshot())
        try:
            self.requester.notify(request)
            self.requests_sent += 1
        except SuggestionError as e:
            logger.warning("Could not request a suggestion for node %s: %s", link.target.id, e)
        return None

    def value_links(self, links: Iterable[Link]) -> None:
        for link in links:
            self.value_link(link)
