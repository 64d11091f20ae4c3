"""Shared fixtures: clean domain configuration per test, recording data stream, result builders."""

import pytest

from research_agent.agent.stream import RecordingDataStream
from research_agent.core.domain import reset_domain_configuration_cache
from research_agent.schemas.tools import SearchResultItem, SearchResults, VideoItem, VideoResults

_DOMAIN_ENV_KEYS = (
    "DEFAULT_INCLUDE_DOMAINS",
    "NEXT_PUBLIC_DEFAULT_INCLUDE_DOMAINS",
    "DEFAULT_EXCLUDE_DOMAINS",
    "NEXT_PUBLIC_DEFAULT_EXCLUDE_DOMAINS",
    "DOMAIN_AGENT_INSTRUCTIONS",
    "NEXT_PUBLIC_DOMAIN_AGENT_INSTRUCTIONS",
)


@pytest.fixture(autouse=True)
def clean_domain_env(monkeypatch: pytest.MonkeyPatch):
    for key in _DOMAIN_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_domain_configuration_cache()
    yield
    reset_domain_configuration_cache()


@pytest.fixture
def data_stream() -> RecordingDataStream:
    return RecordingDataStream()


@pytest.fixture
def search_results():
    """Build SearchResults from (title, url, content) tuples."""

    def _build(*items: tuple[str, str, str], query: str = "q") -> SearchResults:
        return SearchResults(
            query=query,
            results=[SearchResultItem(title=t, url=u, content=c) for t, u, c in items],
        )

    return _build


@pytest.fixture
def video_results():
    """Build VideoResults from (title, link, snippet) tuples."""

    def _build(*items: tuple[str, str, str | None], query: str = "q") -> VideoResults:
        return VideoResults(query=query, videos=[VideoItem(title=t, link=l, snippet=s) for t, l, s in items])

    return _build
