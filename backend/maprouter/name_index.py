from __future__ import annotations

import re
from dataclasses import dataclass, field

_NON_NAME_CHARS = re.compile(r"[^a-zA-Z ]")


def clean_string(s: str) -> str:
    """Drop everything but ASCII letters and spaces, then lower-case."""
    return _NON_NAME_CHARS.sub("", s).lower()


@dataclass
class TrieNode:
    links: dict[str, TrieNode] = field(default_factory=dict)
    terminal: bool = False
    # Distinct original names can clean to the same key, so both are sets.
    names: set[str] = field(default_factory=set)
    location_ids: set[int] = field(default_factory=set)

    def mark(self, name: str, location_id: int) -> None:
        self.terminal = True
        self.names.add(name)
        self.location_ids.add(location_id)


class NameIndex:
    """Prefix trie over cleaned place names used for autocomplete.

    Built once at load time and read-only afterwards.
    """

    def __init__(self) -> None:
        self.root = TrieNode()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def add(self, name: str, location_id: int) -> None:
        current = self.root
        # Names that clean to "" (e.g. purely numeric) terminate at the root.
        for ch in clean_string(name):
            nxt = current.links.get(ch)
            if nxt is None:
                nxt = TrieNode()
                current.links[ch] = nxt
            current = nxt
        current.mark(name, location_id)
        self._size += 1

    def _walk_prefix(self, cleaned: str) -> TrieNode | None:
        current = self.root
        for ch in cleaned:
            nxt = current.links.get(ch)
            if nxt is None:
                # Lower -> upper fallback only; upper-case prefixes are already lowered by cleaning.
                nxt = current.links.get(ch.upper())
            if nxt is None:
                return None
            current = nxt
        return current

    def find(self, prefix: str) -> list[str] | None:
        """All original names at or below ``prefix``; None when the prefix is unknown."""
        node = self._walk_prefix(clean_string(prefix))
        if node is None:
            return None
        found: set[str] = set()
        stack = [node]
        while stack:
            current = stack.pop()
            if current.terminal:
                found.update(current.names)
            stack.extend(current.links.values())
        return sorted(found)

    def find_trie_node(self, name: str) -> TrieNode | None:
        """Exact path lookup without cleaning or case fallback."""
        current = self.root
        for ch in name:
            nxt = current.links.get(ch)
            if nxt is None:
                return None
            current = nxt
        return current

    def location_ids(self, name: str) -> set[int]:
        node = self.find_trie_node(clean_string(name))
        if node is None or not node.terminal:
            return set()
        return set(node.location_ids)
