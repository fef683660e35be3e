"""Unit tests for character-budgeted section rendering."""
from __future__ import annotations

from agent_briefing.context.budget import SECTION_SEPARATOR, Section, render_sections


class TestSection:
    def test_empty_section_is_falsy(self) -> None:
        assert not Section("Empty")
        assert Section("Full", ["- x"])

    def test_render(self) -> None:
        assert Section("Tasks", ["- a", "- b"]).render() == "## Tasks\n- a\n- b"


class TestRenderSections:
    def test_nothing_to_render(self) -> None:
        assert render_sections("[h]", [Section("A"), Section("B")]) == ""

    def test_empty_sections_skipped(self) -> None:
        text = render_sections("[h]", [Section("A"), Section("B", ["- b"])])
        assert text == "[h]\n\n## B\n- b"

    def test_all_fit(self) -> None:
        text = render_sections("[h]", [Section("A", ["- a"]), Section("B", ["- b"])])
        assert text == "[h]\n\n## A\n- a\n\n## B\n- b"

    def test_first_section_kept_even_when_oversized(self) -> None:
        big = Section("Big", ["x" * 500])
        text = render_sections("[h]", [big, Section("Small", ["- s"])], max_chars=100)
        assert text == "[h]" + SECTION_SEPARATOR + big.render()

    def test_stops_at_first_overflow(self) -> None:
        first = Section("A", ["a" * 20])
        overflow = Section("B", ["b" * 200])
        small = Section("C", ["c"])
        text = render_sections("[h]", [first, overflow, small], max_chars=120)
        assert "## A" in text
        assert "## B" not in text
        assert "## C" not in text

    def test_budget_is_respected_after_first_section(self) -> None:
        sections = [Section(f"S{n}", ["x" * 40]) for n in range(10)]
        text = render_sections("[h]", sections, max_chars=200)
        assert len(text) <= 200
        titles = [line for line in text.splitlines() if line.startswith("## ")]
        assert titles == ["## S0", "## S1", "## S2", "## S3"]

    def test_exact_fit_is_included(self) -> None:
        first = Section("A", ["a"])
        second = Section("B", ["b"])
        full = "[h]\n\n## A\na\n\n## B\nb"
        assert render_sections("[h]", [first, second], max_chars=len(full)) == full
        assert "## B" not in render_sections("[h]", [first, second], max_chars=len(full) - 1)
