"""
Unit tests for build_execution_summary(): markers, sources, snippets and localized lines.
"""

import re

from research_agent.agent.localization import get_localization
from research_agent.agent.summary import build_execution_summary
from research_agent.schemas.tools import ExecutedStep, SearchResults

EN = get_localization("en")


def _step(id: str, tool: str = "search", result=None, error: str | None = None, description: str | None = None) -> ExecutedStep:
    return ExecutedStep(
        id=id,
        tool=tool,
        description=description or f"step {id}",
        parameters={},
        result=result,
        error=error,
    )


def _markers(text: str) -> list[str]:
    return re.findall(r"\[\d+\]", text)


class TestBuildExecutionSummary:
    def test_search_results_get_sequential_markers_and_directory(self, search_results) -> None:
        result = search_results(
            ("Climate report", "https://a.example/report", "Global temperatures rose."),
            ("Ocean data", "https://b.example/ocean", "Sea levels are rising."),
        )
        summary = build_execution_summary([_step("s1", result=result)], EN)

        assert [s.marker for s in summary.sources] == ["[1]", "[2]"]
        assert [s.url for s in summary.sources] == ["https://a.example/report", "https://b.example/ocean"]
        assert all(s.step_id == "s1" for s in summary.sources)
        assert set(_markers(summary.summary)) == {"[1]", "[2]"}
        assert summary.summary.startswith(EN.research_summary_heading)
        directory = summary.summary.split(EN.source_directory_heading + "\n", 1)[1]
        assert directory.splitlines() == [
            "[1] Climate report – https://a.example/report",
            "[2] Ocean data – https://b.example/ocean",
        ]

    def test_markers_are_global_across_steps(self, search_results, video_results) -> None:
        steps = [
            _step("s1", result=search_results(("A", "https://a", "a"), ("B", "https://b", "b"))),
            _step("broken", error="timeout"),
            _step("v1", tool="videoSearch", result=video_results(("V1", "https://v/1", None), ("V2", "https://v/2", "clip"))),
            _step("r1", tool="retrieve", result=search_results(("Page", "https://page", "body"))),
        ]
        summary = build_execution_summary(steps, EN)

        assert [s.marker for s in summary.sources] == ["[1]", "[2]", "[3]", "[4]", "[5]"]
        assert [s.step_id for s in summary.sources] == ["s1", "s1", "v1", "v1", "r1"]
        assert "broken" not in {s.step_id for s in summary.sources}

    def test_failed_step_renders_localized_notice_without_sources(self) -> None:
        summary = build_execution_summary([_step("s1", error="timeout", description="Search news")], EN)
        assert "• Search news\n  ⚠️ Failed: timeout" in summary.summary
        assert summary.sources == []
        assert EN.source_directory_heading not in summary.summary

    def test_search_uses_first_three_results(self, search_results) -> None:
        result = search_results(*[(f"T{i}", f"https://x/{i}", "c") for i in range(5)])
        summary = build_execution_summary([_step("s1", result=result)], EN)
        assert [s.url for s in summary.sources] == ["https://x/0", "https://x/1", "https://x/2"]

    def test_search_snippet_is_collapsed_and_truncated(self, search_results) -> None:
        content = "word\n\n  " * 60
        summary = build_execution_summary([_step("s1", result=search_results(("T", "https://x", content)))], EN)
        snippet_line = summary.summary.splitlines()[4]
        snippet = snippet_line.strip()
        assert snippet.endswith("…")
        assert len(snippet) == 161
        assert "  " not in snippet and "\n" not in snippet

    def test_short_snippet_has_no_ellipsis(self, search_results) -> None:
        summary = build_execution_summary([_step("s1", result=search_results(("T", "https://x", "short text")))], EN)
        assert "    short text" in summary.summary
        assert "…" not in summary.summary

    def test_retrieve_uses_first_item_and_200_chars(self, search_results) -> None:
        result = search_results(("Page", "https://page", "x" * 500), ("Other", "https://other", "y"))
        summary = build_execution_summary([_step("r1", tool="retrieve", result=result)], EN)
        assert [s.url for s in summary.sources] == ["https://page"]
        assert "x" * 200 + "…" in summary.summary
        assert "x" * 201 not in summary.summary

    def test_video_without_snippet_has_no_snippet_line(self, video_results) -> None:
        summary = build_execution_summary(
            [_step("v1", tool="videoSearch", result=video_results(("Clip", "https://v/1", None)))], EN
        )
        assert "  – [1] Clip (https://v/1)" in summary.summary
        assert summary.summary.split("\n\n")[1] == "• step v1\n  – [1] Clip (https://v/1)"

    def test_empty_results_render_localized_lines(self, search_results, video_results) -> None:
        steps = [
            _step("s1", result=search_results()),
            _step("r1", tool="retrieve", result=SearchResults(results=[])),
            _step("v1", tool="videoSearch", result=video_results()),
        ]
        summary = build_execution_summary(steps, EN)
        assert EN.no_search_results in summary.summary
        assert EN.unable_to_retrieve in summary.summary
        assert EN.no_videos in summary.summary
        assert summary.sources == []
        assert _markers(summary.summary) == []

    def test_no_steps_renders_nothing_executed(self) -> None:
        summary = build_execution_summary([], EN)
        assert summary.summary == f"{EN.research_summary_heading}\n\n{EN.nothing_executed}"
        assert summary.sources == []

    def test_untitled_source_omits_title_segment(self, search_results) -> None:
        summary = build_execution_summary([_step("s1", result=search_results(("", "https://x", "c")))], EN)
        assert summary.sources[0].title is None
        assert "\n  – [1] https://x\n    c" in summary.summary
        assert "[1]  " not in summary.summary
        assert summary.summary.endswith(f"{EN.source_directory_heading}\n[1] https://x")

    def test_untitled_video_omits_title_segment(self, video_results) -> None:
        summary = build_execution_summary(
            [_step("v1", tool="videoSearch", result=video_results(("", "https://v/1", None)))], EN
        )
        assert summary.summary.split("\n\n")[1] == "• step v1\n  – [1] https://v/1"

    def test_localized_output(self, search_results) -> None:
        es = get_localization("es")
        summary = build_execution_summary(
            [_step("s1", error="timeout"), _step("s2", result=search_results(("T", "https://x", "c")))], es
        )
        assert summary.summary.startswith("Resumen de la investigación externa:")
        assert "⚠️ Error: timeout" in summary.summary
        assert "Directorio de fuentes:\n[1] T – https://x" in summary.summary
