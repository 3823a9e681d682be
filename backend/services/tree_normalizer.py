"""
Tree Normalizer Service

Converts untrusted, AI-produced nested topic trees into canonical MindMapTree objects.
Handles all defaulting, ID assignment and fan-out limits deterministically.
Never raises: unusable input degrades to a center-only tree.
"""

import json
import logging
import re
from collections import deque
from typing import Any, Dict, List, Optional

from schemas.mind_map import MindMapNode, MindMapTree, NodeLevel, CHILD_KEYS
from schemas.mind_map_config import NormalizerConfig, StyleConfig
from services.node_id import generate_path_id, unique_id
from utils.color import coerce_color

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def parse_llm_response(text: str) -> Optional[Dict[str, Any]]:
    """
    Extract a JSON object from a raw model response.

    Strips markdown code fences, keeps the outermost {...} block and drops
    trailing commas. Returns None when nothing parseable is found.
    """
    if not isinstance(text, str) or not text.strip():
        return None

    cleaned = text.strip()
    fenced = _CODE_FENCE.search(cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()

    start = cleaned.find('{')
    end = cleaned.rfind('}')
    if start == -1 or end <= start:
        return None

    cleaned = cleaned[start:end + 1]
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        # Only repair trailing commas once strict parsing has failed
        try:
            parsed = json.loads(_TRAILING_COMMA.sub(r"\1", cleaned))
        except json.JSONDecodeError as e:
            logger.warning(f"Could not parse mind map JSON: {e}")
            return None

    return parsed if isinstance(parsed, dict) else None


class TreeNormalizer:
    """
    Deterministic normalizer from raw nested topic data to a valid MindMapTree.

    Responsibilities:
    - Default missing labels and descriptions per level
    - Assign path IDs where the input has none (or duplicates)
    - Assign branch colors from the palette and propagate them downwards
    - Truncate fan-out to the configured per-level caps
    - Stop at the detail level regardless of input depth
    """

    def __init__(self, config: Optional[NormalizerConfig] = None, style: Optional[StyleConfig] = None):
        self.config = config or NormalizerConfig()
        self.style = style or StyleConfig()

    def normalize(self, raw: Any) -> MindMapTree:
        """Normalize a raw tree. Falls back to a center-only tree on unusable input."""
        if not isinstance(raw, dict):
            logger.warning(f"Mind map input is not an object ({type(raw).__name__}); using fallback tree")
            return self.fallback_tree()

        center_raw = raw.get("center", raw.get("root"))
        if isinstance(center_raw, str):
            center_raw = {"label": center_raw}
        if not isinstance(center_raw, dict):
            logger.warning("Mind map input has no usable center node; using fallback tree")
            return self.fallback_tree()

        # Branches usually sit beside the center, but may be nested inside it
        if "branches" in raw:
            branches = self._child_list(raw, NodeLevel.CENTER, key="branches")
        else:
            branches = self._child_list(center_raw, NodeLevel.CENTER)

        center = self._make_node(
            center_raw, level=NodeLevel.CENTER, path=generate_path_id(None, 0),
            parent=None, index=0, taken=set(),
        )
        return self._build(center, branches)

    def normalize_text(self, text: str) -> MindMapTree:
        """Parse a raw model response and normalize it."""
        parsed = parse_llm_response(text)
        if parsed is None:
            logger.warning("Mind map response contained no JSON object; using fallback tree")
        return self.normalize(parsed)

    def fallback_tree(self, label: Optional[str] = None) -> MindMapTree:
        center = MindMapNode(
            id=generate_path_id(None, 0),
            label=label or self.config.fallback_label,
            level=NodeLevel.CENTER,
            radius=self.style.radius_for(NodeLevel.CENTER),
        )
        return MindMapTree(nodes=[center])

    # ---------- internals ----------

    def _build(self, center: MindMapNode, branches: List[Dict[str, Any]]) -> MindMapTree:
        nodes: List[MindMapNode] = [center]
        taken = {center.id}

        # (raw entries, parent node, parent path)
        queue = deque([(branches, center, generate_path_id(None, 0))])
        while queue:
            raw_children, parent, parent_path = queue.popleft()
            level = NodeLevel(parent.level + 1)

            for index, raw_child in enumerate(raw_children):
                path = generate_path_id(parent_path, index)
                node = self._make_node(raw_child, level, path, parent, index, taken)
                taken.add(node.id)
                nodes.append(node)

                if level in CHILD_KEYS:
                    grandchildren = self._child_list(raw_child, level)
                    if grandchildren:
                        queue.append((grandchildren, node, path))

        return MindMapTree(nodes=nodes)

    def _child_list(self, raw_node: Dict[str, Any], level: NodeLevel, key: Optional[str] = None) -> List[Dict[str, Any]]:
        key = key or CHILD_KEYS[level]
        value = raw_node.get(key)
        if value is None:
            value = raw_node.get("children")
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning(f"'{key}' is not a list at level {int(level)}; ignoring children")
            return []

        entries = []
        for entry in value:
            if isinstance(entry, dict):
                entries.append(entry)
            elif isinstance(entry, str) and entry.strip():
                entries.append({"label": entry})

        cap = self.config.max_children[int(level)]
        if len(entries) > cap:
            logger.debug(f"Truncating {len(entries)} '{key}' to {cap} at level {int(level)}")
            entries = entries[:cap]
        return entries

    def _make_node(
        self,
        raw: Dict[str, Any],
        level: NodeLevel,
        path: str,
        parent: Optional[MindMapNode],
        index: int,
        taken: set,
    ) -> MindMapNode:
        if level == NodeLevel.CENTER:
            color = None
        elif level == NodeLevel.BRANCH:
            color = coerce_color(raw.get("color")) or self.style.branch_color(index)
        else:
            color = parent.color

        return MindMapNode(
            id=self._node_id(raw.get("id"), path, taken),
            label=self._text(raw.get("label")) or self._text(raw.get("title")) or self.config.placeholder_labels[int(level)],
            description=self._text(raw.get("description")),
            level=level,
            color=color,
            parent_id=parent.id if parent else None,
            radius=self.style.radius_for(level),
        )

    @staticmethod
    def _node_id(raw_id: Any, path: str, taken: set) -> str:
        if isinstance(raw_id, bool):
            raw_id = None
        if isinstance(raw_id, (int, float)):
            raw_id = str(raw_id)
        if isinstance(raw_id, str) and raw_id.strip() and raw_id.strip() not in taken:
            return raw_id.strip()
        return unique_id(path, taken)

    @staticmethod
    def _text(value: Any) -> Optional[str]:
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, (int, float)):
            value = str(value)
        if not isinstance(value, str):
            return None
        value = value.strip()
        return value or None
