"""Aho-Corasick automaton compiled from a dictionary snapshot.

Nodes live in an arena and are addressed by index; node ``0`` is the root.
For every node the automaton keeps:

* ``children``  – character → child index (parent owns its children)
* ``failure``   – index of the node spelling the longest proper suffix of
  this node's prefix that is also a prefix of some term
* ``terms``     – the term text for terminal nodes, ``None`` otherwise
* ``output``    – the nearest terminal node reachable through the failure
  chain (excluding the node itself), ``NO_NODE`` when there is none

All four tables are tuples and the child maps are read-only proxies, so a
published automaton can be shared by any number of threads.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)

ROOT = 0
NO_NODE = -1


@dataclass(frozen=True, slots=True)
class Automaton:
    children: tuple[Mapping[str, int], ...]
    failure: tuple[int, ...]
    terms: tuple[str | None, ...]
    output: tuple[int, ...]

    @property
    def node_count(self) -> int:
        return len(self.children)

    @property
    def term_count(self) -> int:
        return sum(1 for term in self.terms if term is not None)

    def is_empty(self) -> bool:
        return len(self.children) == 1

    def step(self, node: int, char: str) -> int:
        """Advance from ``node`` on ``char``, following failure links on mismatch."""
        children = self.children
        while node != ROOT and char not in children[node]:
            node = self.failure[node]
        return children[node].get(char, ROOT)

    def emitted(self, node: int) -> Iterator[str]:
        """Terms ending at ``node``: the node itself, then its failure chain."""
        hit = node if self.terms[node] is not None else self.output[node]
        while hit != NO_NODE:
            yield self.terms[hit]  # type: ignore[misc]
            hit = self.output[hit]


EMPTY_AUTOMATON = Automaton(
    children=(MappingProxyType({}),),
    failure=(ROOT,),
    terms=(None,),
    output=(NO_NODE,),
)


def build_automaton(terms: Iterable[str]) -> Automaton:
    """Compile normalized ``terms`` into a fresh, immutable automaton.

    Both phases are linear in the total number of characters across terms.
    Empty strings are ignored; an empty input yields a root-only automaton.
    """
    children: list[dict[str, int]] = [{}]
    attached: list[str | None] = [None]

    for term in terms:
        if not term:
            continue
        node = ROOT
        for char in term:
            nxt = children[node].get(char)
            if nxt is None:
                nxt = len(children)
                children[node][char] = nxt
                children.append({})
                attached.append(None)
            node = nxt
        attached[node] = term

    failure = [ROOT] * len(children)
    output = [NO_NODE] * len(children)

    queue: deque[int] = deque()
    for child in children[ROOT].values():
        queue.append(child)

    while queue:
        parent = queue.popleft()
        for char, child in children[parent].items():
            queue.append(child)
            fallback = failure[parent]
            while fallback != ROOT and char not in children[fallback]:
                fallback = failure[fallback]
            target = children[fallback].get(char, ROOT)
            failure[child] = target
            output[child] = target if attached[target] is not None else output[target]

    automaton = Automaton(
        children=tuple(MappingProxyType(mapping) for mapping in children),
        failure=tuple(failure),
        terms=tuple(attached),
        output=tuple(output),
    )
    logger.debug("automaton built: nodes=%d terms=%d", automaton.node_count, automaton.term_count)
    return automaton
