"""
Scene Translator

Converts a positioned MindMapTree into the renderer-agnostic scene description.
All styling and label handling is done here deterministically; no layout logic.
"""

import json
from typing import Dict, Any, List, Optional, Union

from schemas.mind_map import MindMapNode, MindMapTree, NodeLevel
from schemas.mind_map_config import StyleConfig
from schemas.scene import (
    CirclePrimitive, LinePrimitive, NodeMetadata, SceneBounds, SceneInfo, MindMapScene
)
from services.radial_layout import LayoutResult
from utils.color import is_hex_color, normalize_hex, with_alpha


class SceneTranslatorError(Exception):
    """Raised when a tree cannot be serialized (e.g. missing positions)"""
    pass


def truncate_label(label: str, max_length: int, ellipsis: str = "...") -> str:
    """
    Labels longer than `max_length` are cut to exactly `max_length`
    characters followed by the ellipsis; shorter labels pass through.
    """
    if len(label) <= max_length:
        return label
    return label[:max_length] + ellipsis


class SceneTranslator:
    """
    Deterministic translator from a positioned tree to a MindMapScene.
    Same input always yields the same scene (and the same JSON bytes).
    """

    def __init__(self, style: Optional[StyleConfig] = None):
        self.style = style or StyleConfig()

    def translate(self, layout: Union[LayoutResult, MindMapTree]) -> MindMapScene:
        """
        Convert a layout result (or an already positioned tree) to a scene.

        Raises:
            SceneTranslatorError: if any node has no position
        """
        tree = layout.tree if isinstance(layout, LayoutResult) else layout

        unplaced = [n.id for n in tree.nodes if n.position is None]
        if unplaced:
            raise SceneTranslatorError(f"Nodes without position: {', '.join(unplaced)}")

        by_id: Dict[str, MindMapNode] = {n.id: n for n in tree.nodes}
        child_counts = tree.child_counts()

        circles = [self._convert_node(node) for node in tree.nodes]
        lines = [
            self._convert_edge(by_id[parent_id], by_id[child_id])
            for parent_id, child_id in tree.edges()
        ]
        metadata = [
            NodeMetadata(
                id=node.id,
                label=node.label,
                description=node.description,
                level=int(node.level),
                child_count=child_counts.get(node.id, 0),
            )
            for node in tree.nodes
        ]

        center = tree.center
        return MindMapScene(
            circles=circles,
            lines=lines,
            nodes=metadata,
            bounds=self._compute_bounds(circles),
            metadata=SceneInfo(
                title=center.label if center else "",
                node_count=len(circles),
                edge_count=len(lines),
            ),
        )

    def to_json(self, scene: MindMapScene) -> str:
        """Canonical JSON: sorted keys and fixed separators."""
        return json.dumps(scene.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))

    def to_dict(self, scene: MindMapScene) -> Dict[str, Any]:
        return scene.model_dump(mode="json")

    def _convert_node(self, node: MindMapNode) -> CirclePrimitive:
        """Convert a positioned node to a circle primitive"""
        level = int(node.level)
        return CirclePrimitive(
            id=node.id,
            x=node.position.x,
            y=node.position.y,
            radius=self.style.radius_for(level),
            fill_color=self._fill_color(node),
            stroke_color=self.style.stroke_color,
            stroke_width=self.style.stroke_width,
            display_label=truncate_label(node.label, self.style.max_label_length_for(level), self.style.ellipsis),
            text_size=self.style.text_size_for(level),
            # Center and branch fills are saturated, so their text is light
            text_color=self.style.light_text_color if level <= NodeLevel.BRANCH else self.style.dark_text_color,
            level=level,
        )

    def _convert_edge(self, parent: MindMapNode, child: MindMapNode) -> LinePrimitive:
        """Convert a parent -> child relation to a line primitive"""
        return LinePrimitive(
            from_id=parent.id,
            to_id=child.id,
            color=self._base_color(child),
            stroke_width=float(max(3 - int(child.level), 1)),
            opacity=self.style.edge_opacity,
        )

    def _fill_color(self, node: MindMapNode) -> str:
        if node.level == NodeLevel.CENTER:
            return self.style.center_fill

        color = self._base_color(node)
        if node.level == NodeLevel.BRANCH:
            return with_alpha(color, 1.0)
        return with_alpha(color, self.style.fade_alpha[int(node.level)])

    def _base_color(self, node: MindMapNode) -> str:
        return normalize_hex(node.color) if is_hex_color(node.color) else self.style.default_color

    def _compute_bounds(self, circles: List[CirclePrimitive]) -> SceneBounds:
        if not circles:
            return SceneBounds()
        return SceneBounds(
            min_x=min(c.x - c.radius for c in circles),
            min_y=min(c.y - c.radius for c in circles),
            max_x=max(c.x + c.radius for c in circles),
            max_y=max(c.y + c.radius for c in circles),
        )
