from __future__ import annotations

from typing import List, Set

from .forest import Forest


class VisibilityState:
    """Collapsed subtrees of one editor view.

    Purely a view concern: never persisted and never consulted by the
    mutation or persistence code. Each editor owns its own instance.
    """

    def __init__(self) -> None:
        self._collapsed: Set[str] = set()

    def toggle_collapse(self, node_id: str) -> bool:
        if node_id in self._collapsed:
            self._collapsed.discard(node_id)
        else:
            self._collapsed.add(node_id)
        return node_id in self._collapsed

    def is_collapsed(self, node_id: str) -> bool:
        return node_id in self._collapsed

    def collapse(self, node_id: str) -> None:
        self._collapsed.add(node_id)

    def expand(self, node_id: str) -> None:
        self._collapsed.discard(node_id)

    def expand_all(self) -> None:
        self._collapsed.clear()

    reset = expand_all

    def collapsed_ids(self) -> List[str]:
        return sorted(self._collapsed)

    def is_hidden(self, node_id: str, forest: Forest) -> bool:
        """True when some ancestor of ``node_id`` is collapsed."""

        seen = {node_id}
        current = forest.parent_of(node_id)
        while current is not None and current not in seen:
            if current in self._collapsed:
                return True
            seen.add(current)
            current = forest.parent_of(current)
        return False

    def prune(self, forest: Forest) -> None:
        self._collapsed = {node_id for node_id in self._collapsed if node_id in forest}
