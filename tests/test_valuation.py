"""
Tests for link valuation and the suggestion side-channel.

Resolved links are worth -overlap_weight per shared attribute; links with
missing quals trigger a suggestion request and stay unresolved.
"""

from __future__ import annotations

import json
import threading
from urllib.error import URLError

import pytest

from qualwizard.config import Config
from qualwizard.exceptions import SuggestionError
from qualwizard.parser.models import Qual, QualBatch
from qualwizard.wizard import suggest as suggest_module
from qualwizard.wizard.links import make_links
from qualwizard.wizard.models import Node
from qualwizard.wizard.suggest import (
    HttpSuggestionRequester,
    NullSuggestionRequester,
    SuggestionRequest,
    SuggestionRequester,
    requester_from_config,
)
from qualwizard.wizard.valuation import LinkValuator, link_cost


def make_node(qualid: int, *specs: tuple[int, int]) -> Node:
    quals = [
        Qual(relid=relid, attnum=attnum, opno=96, queryid=qualid, indexams=frozenset({"btree"}))
        for relid, attnum in specs
    ]
    return Node.from_batch(QualBatch(qualid=qualid, where_clause=f"q{qualid}", quals=quals))


class FailingRequester(SuggestionRequester):
    def notify(self, request: SuggestionRequest) -> None:
        raise SuggestionError("cannot submit", url="http://nowhere")


# =============================================================================
# LinkValuator
# =============================================================================


class TestValueLink:
    """Value assignment per link."""

    def test_full_overlap_single_attribute(self, requester) -> None:
        link1, link2 = make_links(make_node(1, (1, 3)), make_node(2, (1, 3)))
        valuator = LinkValuator("db", requester=requester, config=Config())

        assert valuator.value_link(link1) == -1000
        assert valuator.value_link(link2) == -1000
        assert link1.resolved
        assert requester.requests == []

    def test_value_scales_with_overlap(self, requester) -> None:
        link1, _ = make_links(make_node(1, (1, 1), (1, 2), (1, 3)), make_node(2, (1, 1), (1, 2), (1, 3)))

        LinkValuator("db", requester=requester, config=Config()).value_link(link1)

        assert link1.value == -3000

    def test_resolved_value_never_positive(self, requester) -> None:
        link1, _ = make_links(make_node(1), make_node(2))

        LinkValuator("db", requester=requester, config=Config()).value_link(link1)

        assert link1.value == 0
        assert link1.value <= 0

    def test_custom_overlap_weight(self, requester) -> None:
        link1, _ = make_links(make_node(1, (1, 3)), make_node(2, (1, 3)))

        LinkValuator("db", requester=requester, config=Config(overlap_weight=10)).value_link(link1)

        assert link1.value == -10

    def test_missing_quals_request_suggestion(self, requester) -> None:
        a = make_node(1, (1, 1))
        b = make_node(2, (2, 5))
        link1, link2 = make_links(a, b)
        valuator = LinkValuator("db42", requester=requester, config=Config())

        assert valuator.value_link(link2) is None

        assert link2.value is None
        assert not link2.resolved
        assert valuator.requests_sent == 1
        request = requester.requests[0]
        assert request.database == "db42"
        assert request.qual["id"] == 2
        assert "links" not in request.qual
        assert request.qual["quals"] == [
            {
                "relid": 2,
                "attnum": 5,
                "opno": 96,
                "queryid": 2,
                "indexams": ["btree"],
                "relname": None,
                "attname": None,
            }
        ]

    def test_value_links_requests_once_per_incomplete_link(self, requester) -> None:
        links = make_links(make_node(1, (1, 1)), make_node(2, (2, 5)))

        LinkValuator("db", requester=requester, config=Config()).value_links(links)

        assert len(requester.requests) == 2
        assert {r.qual["id"] for r in requester.requests} == {1, 2}

    def test_requester_failure_is_swallowed(self) -> None:
        _, link2 = make_links(make_node(1, (1, 1)), make_node(2, (2, 5)))
        valuator = LinkValuator("db", requester=FailingRequester(), config=Config())

        assert valuator.value_link(link2) is None
        assert valuator.requests_sent == 0

    def test_defaults_to_null_requester(self) -> None:
        valuator = LinkValuator("db", config=Config())

        assert isinstance(valuator.requester, NullSuggestionRequester)


class TestLinkCost:
    """Fallback for unresolved links."""

    def test_resolved_link_uses_value(self) -> None:
        link1, _ = make_links(make_node(1, (1, 3)), make_node(2, (1, 3)))
        link1.value = -2000

        assert link_cost(link1, Config()) == -2000

    def test_unresolved_link_uses_sentinel(self) -> None:
        link1, _ = make_links(make_node(1, (1, 1)), make_node(2, (2, 1)))

        assert link_cost(link1, Config()) == 1000
        assert link_cost(link1, Config(unresolved_link_value=42.5)) == 42.5


# =============================================================================
# HTTP requester
# =============================================================================


class FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *args: object) -> None:
        return None


class TestHttpSuggestionRequester:
    """POST /database/<db>/suggest/ from a worker thread."""

    def test_url_for_quotes_database(self) -> None:
        requester = HttpSuggestionRequester("http://powa.local/")
        try:
            assert requester.url_for("prod") == "http://powa.local/database/prod/suggest/"
            assert requester.url_for("a/b c") == "http://powa.local/database/a%2Fb%20c/suggest/"
        finally:
            requester.close()

    def test_posts_json_payload(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sent = []

        def fake_urlopen(req, timeout=None):
            sent.append((req, timeout))
            return FakeResponse(200)

        monkeypatch.setattr(suggest_module, "urlopen", fake_urlopen)
        requester = HttpSuggestionRequester("http://powa.local", timeout=2.0)
        try:
            future = requester.submit(SuggestionRequest(database="prod", qual={"id": 7, "quals": []}))
            assert future.result(timeout=5) == 200
        finally:
            requester.close(wait=True)

        req, timeout = sent[0]
        assert req.full_url == "http://powa.local/database/prod/suggest/"
        assert req.get_method() == "POST"
        assert req.get_header("Content-type") == "application/json"
        assert json.loads(req.data.decode("utf-8")) == {"qual": {"id": 7, "quals": []}}
        assert timeout == 2.0

    def test_notify_does_not_wait_for_delivery(self, monkeypatch: pytest.MonkeyPatch) -> None:
        release = threading.Event()
        started = threading.Event()

        def blocking_urlopen(req, timeout=None):
            started.set()
            release.wait(timeout=10)
            return FakeResponse(204)

        monkeypatch.setattr(suggest_module, "urlopen", blocking_urlopen)
        requester = HttpSuggestionRequester("http://powa.local")
        try:
            requester.notify(SuggestionRequest(database="prod", qual={"id": 1}))

            # notify() came back while the POST is still stuck in the server
            assert started.wait(timeout=5)
            assert not release.is_set()
        finally:
            release.set()
            requester.close(wait=True)

    def test_delivery_failure_is_logged_not_raised(self, monkeypatch: pytest.MonkeyPatch, caplog) -> None:
        def failing_urlopen(req, timeout=None):
            raise URLError("connection refused")

        monkeypatch.setattr(suggest_module, "urlopen", failing_urlopen)
        requester = HttpSuggestionRequester("http://powa.local")
        try:
            future = requester.submit(SuggestionRequest(database="prod"))
            assert future.result(timeout=5) is None
        finally:
            requester.close(wait=True)

        assert "Suggestion request" in caplog.text

    def test_closed_requester_rejects_requests(self) -> None:
        requester = HttpSuggestionRequester("http://powa.local")
        requester.close()

        with pytest.raises(SuggestionError):
            requester.notify(SuggestionRequest(database="prod"))

    def test_payload_shape(self) -> None:
        request = SuggestionRequest(database="prod", qual={"id": 1})

        assert request.payload() == {"qual": {"id": 1}}


def test_null_requester_accepts_anything() -> None:
    NullSuggestionRequester().notify(SuggestionRequest(database="prod", qual={"id": 1}))



class TestRequesterFromConfig:
    """Requester selection from the suggestion settings."""

    def test_enabled_by_default(self) -> None:
        requester = requester_from_config(Config(suggest_base_url="http://powa.local", suggest_timeout_seconds=3))
        try:
            assert isinstance(requester, HttpSuggestionRequester)
            assert requester.base_url == "http://powa.local"
            assert requester.timeout == 3
        finally:
            requester.close()

    def test_base_url_override(self) -> None:
        requester = requester_from_config(Config(), base_url="http://other.local")
        try:
            assert requester.url_for("db") == "http://other.local/database/db/suggest/"
        finally:
            requester.close()

    def test_disabled_in_config(self) -> None:
        assert isinstance(requester_from_config(Config(suggest_enabled=False)), NullSuggestionRequester)

    def test_disabled_by_caller(self) -> None:
        assert isinstance(requester_from_config(Config(), enabled=False), NullSuggestionRequester)
