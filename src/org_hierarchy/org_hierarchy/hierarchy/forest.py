from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Sequence

from ..core.exceptions import NotFoundError, ValidationError
from .model import BuildWarning, Node

if TYPE_CHECKING:
    from .visibility import VisibilityState


class Forest:
    """Arena of nodes plus a ``manager_id -> [child ids]`` index.

    The Forest owns every node record. Children are never stored on a node;
    they are read from the index, which is patched on each mutation.
    A node whose manager is absent from the arena is a root.
    """

    def __init__(self, nodes: Iterable[Node] = (), *, warnings: Sequence[BuildWarning] = ()):
        self._nodes: Dict[str, Node] = {}
        self._children: Dict[str, List[str]] = {}
        self.warnings: List[BuildWarning] = list(warnings)
        for node in nodes:
            self.add(node)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def require(self, node_id: Optional[str]) -> Node:
        node = self.get(node_id)
        if node is None:
            raise NotFoundError(f"Employee {node_id} not found in the org chart")
        return node

    def children_of(self, node_id: str) -> List[str]:
        return list(self._children.get(node_id, ()))

    def parent_of(self, node_id: str) -> Optional[str]:
        node = self.require(node_id)
        if node.manager_id in self._nodes:
            return node.manager_id
        return None

    def is_root(self, node_id: str) -> bool:
        return self.parent_of(node_id) is None

    def roots(self) -> List[Node]:
        return [n for n in self._nodes.values() if n.manager_id is None or n.manager_id not in self._nodes]

    def manager_map(self) -> Dict[str, Optional[str]]:
        return {node_id: node.manager_id for node_id, node in self._nodes.items()}

    # --- mutation (used by HierarchyBuilder and TreeMutator only) ---

    def add(self, node: Node) -> Node:
        if node.id in self._nodes:
            raise ValidationError(f"Duplicate employee id {node.id}")
        self._nodes[node.id] = node
        if node.manager_id is not None:
            self._children.setdefault(node.manager_id, []).append(node.id)
        return node

    def set_manager(self, node_id: str, manager_id: Optional[str]) -> Node:
        node = self.require(node_id)
        if node.manager_id == manager_id:
            return node
        self._unlink(node)
        updated = replace(node, manager_id=manager_id)
        self._nodes[node_id] = updated
        if manager_id is not None:
            self._children.setdefault(manager_id, []).append(node_id)
        return updated

    def remove(self, node_id: str) -> Node:
        node = self.require(node_id)
        self._unlink(node)
        del self._nodes[node_id]
        return node

    def _unlink(self, node: Node) -> None:
        if node.manager_id is None:
            return
        siblings = self._children.get(node.manager_id)
        if siblings and node.id in siblings:
            siblings.remove(node.id)
            if not siblings:
                del self._children[node.manager_id]

    # --- traversal ---

    def iter_subtree(self, node_id: str) -> Iterator[str]:
        """Pre-order walk of ``node_id`` and its descendants.

        A visited set keeps the walk finite even if the data is malformed.
        """

        self.require(node_id)
        visited: set[str] = set()
        stack = [node_id]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            yield current
            stack.extend(reversed(self._children.get(current, ())))

    def descendants_of(self, node_id: str) -> List[str]:
        return [n for n in self.iter_subtree(node_id) if n != node_id]

    def hierarchy_levels(self) -> int:
        """Number of levels reachable from the roots (1 when there are only roots)."""

        max_level = 0
        stack = [(root.id, 1) for root in self.roots()]
        seen: set[str] = set()
        while stack:
            node_id, level = stack.pop()
            if node_id in seen:
                continue
            seen.add(node_id)
            max_level = max(max_level, level)
            stack.extend((child, level + 1) for child in self._children.get(node_id, ()))
        return max_level

    def to_tree(self, visibility: Optional["VisibilityState"] = None) -> List[dict]:
        """Nested projection for the view layer, one entry per root."""

        seen: set[str] = set()

        def build(node: Node) -> dict:
            seen.add(node.id)
            manager = self._nodes.get(node.manager_id) if node.manager_id else None
            reports = [
                build(self._nodes[child])
                for child in self._children.get(node.id, ())
                if child not in seen
            ]
            item = node.to_dict()
            item["managerName"] = manager.display_name if manager else None
            item["directReports"] = reports
            item["directReportsCount"] = len(reports)
            item["collapsed"] = bool(visibility and visibility.is_collapsed(node.id))
            return item

        return [build(root) for root in self.roots()]
