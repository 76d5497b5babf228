"""Sheet Decomposition — splits one provider completion into discrete sheets.

Invariants:
    - decompose_sheets NEVER raises and NEVER returns an empty list for non-empty text
    - target_count == 1 → whole text, titled with the topic
    - target_count > 1 → split before unit headers ("## Fiche 2", "# Sheet 3"),
      fragments with <= MIN_FRAGMENT_CHARS non-blank chars dropped;
      fewer than 2 survivors → whole text as one sheet titled with the topic
    - Titles within one result are distinct

Design Decisions:
    - Header regex accepts both the French and the English unit word: the provider
      sometimes answers in the wrong language, the structure is still usable
    - Text before the first unit header is preamble ("Voici tes fiches...") and dropped
    - Zero-width split (lookahead): the header line stays inside its own fragment
"""

import re
from dataclasses import dataclass


MIN_FRAGMENT_CHARS: int = 50

_UNIT_HEADER = re.compile(
    r"^(?=#{1,2}[ \t]+\**[ \t]*(?:fiche|sheet)[ \t]*(?:n°|no\.?)?[ \t]*\d)",
    re.IGNORECASE | re.MULTILINE,
)
_HEADING_LINE = re.compile(r"^#{1,6}[ \t]+(.+)$", re.MULTILINE)
_MARKER_CHARS = re.compile(r"[*#]")


@dataclass(frozen=True)
class SheetDraft:
    """A decomposed unit, not yet persisted."""
    title: str
    content: str


def decompose_sheets(
    text: str, target_count: int, topic: str,
) -> list[SheetDraft]:
    """Split provider output into sheets. Pure, deterministic, total."""
    whole = [SheetDraft(title=topic, content=text.strip())]
    if target_count <= 1:
        return whole

    fragments = _unit_fragments(text)
    if len(fragments) < 2:
        return whole

    drafts = [
        SheetDraft(
            title=extract_title(fragment) or f"{topic} - Partie {i}",
            content=fragment,
        )
        for i, fragment in enumerate(fragments, start=1)
    ]
    return _dedupe_titles(drafts)


def extract_title(fragment: str) -> str | None:
    """First heading line with markdown markers stripped, or None."""
    match = _HEADING_LINE.search(fragment)
    if not match:
        return None
    title = _MARKER_CHARS.sub("", match.group(1)).strip()
    return title or None


def _unit_fragments(text: str) -> list[str]:
    parts = _UNIT_HEADER.split(text)
    return [
        part.strip() for part in parts
        if _UNIT_HEADER.match(part) and len(part.strip()) > MIN_FRAGMENT_CHARS
    ]


def _dedupe_titles(drafts: list[SheetDraft]) -> list[SheetDraft]:
    seen: dict[str, int] = {}
    result = []
    for draft in drafts:
        n = seen.get(draft.title, 0) + 1
        seen[draft.title] = n
        if n > 1:
            draft = SheetDraft(title=f"{draft.title} ({n})", content=draft.content)
        result.append(draft)
    return result
