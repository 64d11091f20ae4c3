"""
Research tool backends: web search (Tavily), URL retrieval (Jina reader) and
video search (Serper).

Each function takes already-validated parameters and returns a typed result or
raises (ServiceUnavailableError when the backend has no API key,
ToolExecutionError for HTTP/transport failures).
"""

import logging
from typing import Any

import httpx

from research_agent.core.config import (
    JINA_API_KEY,
    JINA_READER_URL,
    SEARCH_DEFAULT_DEPTH,
    SEARCH_DEFAULT_MAX_RESULTS,
    SEARCH_MAX_RESULTS_LIMIT,
    SERPER_API_KEY,
    SERPER_VIDEOS_URL,
    TAVILY_API_KEY,
    TAVILY_SEARCH_URL,
    TOOLS_HTTP_TIMEOUT,
    VIDEO_DEFAULT_MAX_RESULTS,
)
from research_agent.core.domain import get_domain_configuration
from research_agent.core.errors import ServiceUnavailableError, ToolExecutionError
from research_agent.schemas.tools import SearchResultItem, SearchResults, VideoItem, VideoResults

logger = logging.getLogger(__name__)


async def _request_json(
    tool: str,
    method: str,
    url: str,
    *,
    headers: dict[str, str],
    json_body: dict[str, Any] | None = None,
) -> Any:
    """Shared HTTP helper: returns decoded JSON or raises ToolExecutionError."""
    try:
        async with httpx.AsyncClient(timeout=TOOLS_HTTP_TIMEOUT) as client:
            response = await client.request(method, url, json=json_body, headers=headers)
            response.raise_for_status()
            return response.json()
    except httpx.TimeoutException as e:
        raise ToolExecutionError(tool, "timeout") from e
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.warning("[tools:%s] HTTP %s: %s", tool, status, e.response.text[:200])
        raise ToolExecutionError(tool, f"{tool} request failed with status {status}", status_code=status) from e
    except httpx.RequestError as e:
        raise ToolExecutionError(tool, f"{tool} request failed: {e}") from e
    except ValueError as e:
        raise ToolExecutionError(tool, f"{tool} returned invalid JSON") from e


async def search(
    query: str,
    max_results: int | None = None,
    search_depth: str | None = None,
    include_domains: list[str] | None = None,
    exclude_domains: list[str] | None = None,
) -> SearchResults:
    """Web search via Tavily. Configured default domains apply when none are given."""
    if not TAVILY_API_KEY:
        raise ServiceUnavailableError("Web search is not configured (TAVILY_API_KEY missing).")
    domains = get_domain_configuration()
    include = include_domains if include_domains else domains.default_include_domains
    exclude = exclude_domains if exclude_domains else domains.default_exclude_domains
    payload: dict[str, Any] = {
        "query": query,
        "max_results": min(max_results or SEARCH_DEFAULT_MAX_RESULTS, SEARCH_MAX_RESULTS_LIMIT),
        "search_depth": search_depth or SEARCH_DEFAULT_DEPTH,
    }
    if include:
        payload["include_domains"] = list(include)
    if exclude:
        payload["exclude_domains"] = list(exclude)
    logger.info("[tools:search] IN  query=%r payload_keys=%s", query, sorted(payload))
    headers = {"Content-Type": "application/json", "Authorization": f"Bearer {TAVILY_API_KEY}"}
    data = await _request_json("search", "POST", TAVILY_SEARCH_URL, headers=headers, json_body=payload)
    items = []
    for r in (data or {}).get("results") or []:
        url = (r.get("url") or "").strip()
        if not url:
            continue
        items.append(SearchResultItem(title=(r.get("title") or "").strip(), url=url, content=r.get("content") or ""))
    logger.info("[tools:search] OUT results=%d", len(items))
    return SearchResults(query=query, results=items)


async def retrieve(url: str) -> SearchResults:
    """Fetch a single page as text via the Jina reader; zero or one result item."""
    headers = {"Accept": "application/json", "X-Return-Format": "markdown"}
    if JINA_API_KEY:
        headers["Authorization"] = f"Bearer {JINA_API_KEY}"
    logger.info("[tools:retrieve] IN  url=%s", url)
    data = await _request_json("retrieve", "GET", f"{JINA_READER_URL}{url}", headers=headers)
    page = (data or {}).get("data") or {}
    content = (page.get("content") or "").strip()
    if not content:
        logger.info("[tools:retrieve] OUT empty content")
        return SearchResults(query=url, results=[])
    item = SearchResultItem(title=(page.get("title") or "").strip(), url=page.get("url") or url, content=content)
    logger.info("[tools:retrieve] OUT content_len=%d", len(content))
    return SearchResults(query=url, results=[item])


async def video_search(query: str, max_results: int | None = None) -> VideoResults:
    """Video search via Serper."""
    if not SERPER_API_KEY:
        raise ServiceUnavailableError("Video search is not configured (SERPER_API_KEY missing).")
    limit = max_results or VIDEO_DEFAULT_MAX_RESULTS
    headers = {"Content-Type": "application/json", "X-API-KEY": SERPER_API_KEY}
    logger.info("[tools:video_search] IN  query=%r max_results=%d", query, limit)
    data = await _request_json("videoSearch", "POST", SERPER_VIDEOS_URL, headers=headers, json_body={"q": query})
    videos = []
    for v in (data or {}).get("videos") or []:
        link = (v.get("link") or "").strip()
        if not link:
            continue
        videos.append(VideoItem(title=(v.get("title") or "").strip(), link=link, snippet=v.get("snippet")))
    logger.info("[tools:video_search] OUT videos=%d", len(videos[:limit]))
    return VideoResults(query=query, videos=videos[:limit])
