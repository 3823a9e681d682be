# schemas/mind_map.py
from __future__ import annotations
from typing import List, Optional, Dict, Tuple
from enum import IntEnum
from pydantic import BaseModel, Field

# ---------- Core Enums ----------

class NodeLevel(IntEnum):
    CENTER = 0
    BRANCH = 1
    CONCEPT = 2
    POINT = 3
    DETAIL = 4

# Raw child-list key for the children of each level
CHILD_KEYS: Dict[NodeLevel, str] = {
    NodeLevel.CENTER: "branches",
    NodeLevel.BRANCH: "concepts",
    NodeLevel.CONCEPT: "points",
    NodeLevel.POINT: "details",
}

# ---------- Tree Models ----------

class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0

class MindMapNode(BaseModel):
    id: str
    label: str
    description: Optional[str] = None
    level: NodeLevel
    color: Optional[str] = None
    parent_id: Optional[str] = None

    # Assigned by the layout engine only
    position: Optional[Position] = None
    radius: float = Field(default=0.0, ge=0)

class PlacedCircle(BaseModel):
    id: str
    x: float
    y: float
    radius: float

class MindMapTree(BaseModel):
    """
    Nodes in breadth-first order, center first. Parents always precede
    their children.
    """
    nodes: List[MindMapNode] = Field(default_factory=list)

    @property
    def center(self) -> Optional[MindMapNode]:
        for node in self.nodes:
            if node.level == NodeLevel.CENTER and node.parent_id is None:
                return node
        return None

    def get(self, node_id: str) -> Optional[MindMapNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def children_of(self, node_id: str) -> List[MindMapNode]:
        return [n for n in self.nodes if n.parent_id == node_id]

    def nodes_at_level(self, level: int) -> List[MindMapNode]:
        return [n for n in self.nodes if n.level == level]

    def child_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {n.id: 0 for n in self.nodes}
        for n in self.nodes:
            if n.parent_id is not None and n.parent_id in counts:
                counts[n.parent_id] += 1
        return counts

    def edges(self) -> List[Tuple[str, str]]:
        return [(n.parent_id, n.id) for n in self.nodes if n.parent_id is not None]

# ---------- Validation Helpers ----------

def validate_tree_structure(tree: MindMapTree) -> List[str]:
    """
    Validate structural constraints for mind map trees:
    - exactly one CENTER node, with no parent
    - every other node has a parent listed before it
    - child level = parent level + 1
    - node IDs are unique
    """
    errs: List[str] = []
    seen: Dict[str, MindMapNode] = {}

    centers = [n for n in tree.nodes if n.level == NodeLevel.CENTER]
    if len(centers) != 1:
        errs.append(f"Tree must have exactly 1 CENTER node (has {len(centers)})")

    for n in tree.nodes:
        if n.id in seen:
            errs.append(f"Duplicate node id '{n.id}'")
            continue

        if n.level == NodeLevel.CENTER:
            if n.parent_id is not None:
                errs.append(f"CENTER node '{n.id}' must not have a parent (has '{n.parent_id}')")
        elif n.parent_id is None:
            errs.append(f"Node '{n.id}' at level {int(n.level)} has no parent")
        elif n.parent_id not in seen:
            errs.append(f"Node '{n.id}' references parent '{n.parent_id}' not placed before it")
        else:
            parent = seen[n.parent_id]
            if n.level != parent.level + 1:
                errs.append(
                    f"Node '{n.id}' has level {int(n.level)} but parent '{parent.id}' "
                    f"has level {int(parent.level)}"
                )

        seen[n.id] = n

    return errs
