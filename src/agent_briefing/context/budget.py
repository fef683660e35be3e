"""Character-budgeted rendering of briefing sections.

Sections are kept whole: the first section that does not fit is dropped
together with every section after it.  The first section is always kept so a briefing is
never empty when something qualified.

Classes
-------
- Section  — a titled block of lines
"""
from __future__ import annotations

from dataclasses import dataclass, field

from agent_briefing.config import DEFAULT_MAX_CHARS

SECTION_SEPARATOR = "\n\n"


@dataclass
class Section:
    title: str
    lines: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.lines)

    def render(self) -> str:
        return f"## {self.title}\n" + "\n".join(self.lines)


def render_sections(
    header: str,
    sections: list[Section],
    max_chars: int = DEFAULT_MAX_CHARS,
) -> str:
    """Render ``header`` followed by as many leading sections as fit.

    Returns ``""`` when no section has content.
    """
    output = ""
    for section in sections:
        if not section:
            continue
        block = section.render()
        if not output:
            output = header + SECTION_SEPARATOR + block
            continue
        if len(output) + len(SECTION_SEPARATOR) + len(block) > max_chars:
            break
        output += SECTION_SEPARATOR + block
    return output


__all__ = ["SECTION_SEPARATOR", "Section", "render_sections"]
