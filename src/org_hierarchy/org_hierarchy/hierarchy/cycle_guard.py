from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Set

from .forest import Forest


def cyclic_ids(managers: Mapping[str, Optional[str]]) -> Set[str]:
    """Ids whose manager chain loops back on itself.

    ``managers`` maps employee id to manager id. Managers missing from the
    mapping end a chain (they are treated like roots).
    """

    state: Dict[str, int] = {}  # 1 = on current path, 2 = finished
    found: Set[str] = set()

    for start in managers:
        if start in state:
            continue
        path: List[str] = []
        current: Optional[str] = start
        while current is not None and current in managers and current not in state:
            state[current] = 1
            path.append(current)
            current = managers[current]
        if current is not None and state.get(current) == 1:
            found.update(path[path.index(current):])
        for node_id in path:
            state[node_id] = 2
    return found


class CycleGuard:
    """Answers "would this reparent create a cycle?" for one Forest.

    Pure queries only; nothing here mutates the forest.
    """

    def __init__(self, forest: Forest):
        self._forest = forest

    def would_create_cycle(self, moving_id: str, proposed_manager_id: Optional[str]) -> bool:
        if proposed_manager_id is None:
            return False
        if proposed_manager_id == moving_id:
            return True

        visited: Set[str] = set()
        stack = [moving_id]
        while stack:
            current = stack.pop()
            if current in visited:
                # Malformed input: stop instead of looping.
                return True
            visited.add(current)
            if current == proposed_manager_id:
                return True
            stack.extend(self._forest.children_of(current))
        return False

    def find_cyclic_nodes(self) -> Set[str]:
        return cyclic_ids(self._forest.manager_map())

    def chain_of(self, node_id: str) -> List[str]:
        """Ancestors of ``node_id``, nearest first, up to its root."""

        chain: List[str] = []
        seen = {node_id}
        current = self._forest.parent_of(node_id)
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            current = self._forest.parent_of(current)
        return chain
