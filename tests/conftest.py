"""Shared fixtures for the qualwizard test suite."""

from __future__ import annotations

import os

import pytest

from qualwizard.config import reset_config
from qualwizard.datasource import DataSourceRegistry
from qualwizard.wizard.suggest import SuggestionRequest, SuggestionRequester


class RecordingRequester(SuggestionRequester):
    """Fake suggestion side-channel that records every request."""

    def __init__(self) -> None:
        self.requests: list[SuggestionRequest] = []
        self.closed = False

    def notify(self, request: SuggestionRequest) -> None:
        self.requests.append(request)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from QUALWIZARD_* variables and global singletons."""
    for key in list(os.environ):
        if key.startswith("QUALWIZARD_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    DataSourceRegistry.reset_instance()
    yield
    reset_config()
    DataSourceRegistry.reset_instance()


@pytest.fixture
def requester() -> RecordingRequester:
    return RecordingRequester()
