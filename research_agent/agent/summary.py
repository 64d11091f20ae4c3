"""
Execution summary: turn executed steps into a citable research summary.

Markers [1], [2], ... are global across all steps, allocated in step order and
then in result order. Failed steps render a one-line notice and never
contribute sources.
"""

import re

from research_agent.agent.localization import Localization
from research_agent.core.config import (
    RETRIEVE_SNIPPET_LENGTH,
    SEARCH_SNIPPET_LENGTH,
    SUMMARY_MAX_ITEMS,
    VIDEO_SNIPPET_LENGTH,
)
from research_agent.schemas.tools import (
    ExecutedStep,
    ExecutionSummary,
    SearchResults,
    SourceReference,
    VideoResults,
)

_WHITESPACE = re.compile(r"\s+")


class _SourceRegistry:
    def __init__(self) -> None:
        self.sources: list[SourceReference] = []

    def add(self, url: str, title: str | None, step_id: str) -> str:
        marker = f"[{len(self.sources) + 1}]"
        self.sources.append(SourceReference(marker=marker, url=url, title=title or None, step_id=step_id))
        return marker


def _snippet(text: str | None, limit: int) -> str:
    collapsed = _WHITESPACE.sub(" ", text or "").strip()
    if len(collapsed) > limit:
        return collapsed[:limit] + "…"
    return collapsed


def _titled(marker: str, title: str, url: str) -> str:
    return f"{marker} {title} ({url})" if title else f"{marker} {url}"


def _format_search(step: ExecutedStep, registry: _SourceRegistry, loc: Localization) -> str:
    result = step.result if isinstance(step.result, SearchResults) else None
    if result is None or not result.results:
        return f"• {step.description}\n  – {loc.no_search_results}"
    lines = [f"• {step.description}"]
    for item in result.results[:SUMMARY_MAX_ITEMS]:
        marker = registry.add(item.url, item.title, step.id)
        lines.append(f"  – {_titled(marker, item.title, item.url)}\n    {_snippet(item.content, SEARCH_SNIPPET_LENGTH)}")
    return "\n".join(lines)


def _format_retrieve(step: ExecutedStep, registry: _SourceRegistry, loc: Localization) -> str:
    result = step.result if isinstance(step.result, SearchResults) else None
    if result is None or not result.results:
        return f"• {step.description}\n  – {loc.unable_to_retrieve}"
    item = result.results[0]
    marker = registry.add(item.url, item.title, step.id)
    return f"• {step.description}\n  – {marker} {item.url}\n    {_snippet(item.content, RETRIEVE_SNIPPET_LENGTH)}"


def _format_videos(step: ExecutedStep, registry: _SourceRegistry, loc: Localization) -> str:
    result = step.result if isinstance(step.result, VideoResults) else None
    if result is None or not result.videos:
        return f"• {step.description}\n  – {loc.no_videos}"
    lines = [f"• {step.description}"]
    for video in result.videos[:SUMMARY_MAX_ITEMS]:
        marker = registry.add(video.link, video.title, step.id)
        line = f"  – {_titled(marker, video.title, video.link)}"
        snippet = _snippet(video.snippet, VIDEO_SNIPPET_LENGTH)
        if snippet:
            line += f"\n    {snippet}"
        lines.append(line)
    return "\n".join(lines)


_FORMATTERS = {
    "search": _format_search,
    "retrieve": _format_retrieve,
    "videoSearch": _format_videos,
}


def build_execution_summary(steps: list[ExecutedStep], loc: Localization) -> ExecutionSummary:
    registry = _SourceRegistry()
    parts: list[str] = []
    for step in steps:
        if step.error is not None:
            parts.append(f"• {step.description}\n  ⚠️ {loc.failed_with_error(step.error)}")
            continue
        formatter = _FORMATTERS.get(step.tool)
        if formatter is not None:
            parts.append(formatter(step, registry, loc))

    rendered = [p.strip() for p in parts if p and p.strip()]
    body = "\n\n".join(rendered) if rendered else loc.nothing_executed
    summary = f"{loc.research_summary_heading}\n\n{body}"

    if registry.sources:
        directory = "\n".join(
            f"{s.marker} {s.title + ' – ' if s.title else ''}{s.url}" for s in registry.sources
        )
        summary += f"\n\n{loc.source_directory_heading}\n{directory}"

    return ExecutionSummary(summary=summary, sources=list(registry.sources))
