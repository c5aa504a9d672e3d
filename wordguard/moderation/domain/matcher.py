"""Single-pass term matching over normalized text."""

from __future__ import annotations

from typing import Iterator

from wordguard.moderation.domain.automaton import ROOT, Automaton


def iter_matches(normalized: str, automaton: Automaton) -> Iterator[tuple[int, str]]:
    """Yield ``(end_index, term)`` for every occurrence, overlaps included.

    ``end_index`` is the index of the term's last character in ``normalized``.
    """
    if automaton.is_empty():
        return
    node = ROOT
    for index, char in enumerate(normalized):
        node = automaton.step(node, char)
        if node == ROOT:
            continue
        for term in automaton.emitted(node):
            yield index, term


def find_all(normalized: str, automaton: Automaton) -> list[str]:
    """Distinct matched terms in order of first detection."""
    seen: dict[str, None] = {}
    for _end, term in iter_matches(normalized, automaton):
        seen.setdefault(term, None)
    return list(seen)
