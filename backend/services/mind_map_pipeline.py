"""
Mind Map Pipeline

Runs raw tree -> normalizer -> radial layout -> scene translator.
Holds configuration only, so one instance can serve concurrent requests.
"""

import logging
from typing import Any, Optional

from schemas.mind_map import MindMapTree
from schemas.mind_map_config import MindMapSettings
from schemas.scene import MindMapScene
from services.radial_layout import RadialLayoutEngine, LayoutResult
from services.tree_normalizer import TreeNormalizer
from translators.markdown_translator import MarkdownTranslator
from translators.scene_translator import SceneTranslator

logger = logging.getLogger(__name__)


class MindMapPipeline:

    def __init__(self, settings: Optional[MindMapSettings] = None):
        self.settings = settings or MindMapSettings()
        self.normalizer = TreeNormalizer(self.settings.normalizer, self.settings.style)
        self.layout_engine = RadialLayoutEngine(self.settings.layout, self.settings.style)
        self.scene_translator = SceneTranslator(self.settings.style)
        self.markdown_translator = MarkdownTranslator()

    def normalize(self, raw: Any) -> MindMapTree:
        return self.normalizer.normalize(raw)

    def layout(self, raw: Any, seed: Optional[int] = None) -> LayoutResult:
        tree = self.normalizer.normalize(raw)
        return self._layout_tree(tree, seed)

    def build_scene(self, raw: Any, seed: Optional[int] = None) -> MindMapScene:
        """Build a scene from a raw (possibly malformed) nested tree."""
        return self.scene_translator.translate(self.layout(raw, seed))

    def build_scene_from_text(self, text: str, seed: Optional[int] = None) -> MindMapScene:
        """Build a scene from a raw model response containing JSON."""
        tree = self.normalizer.normalize_text(text)
        return self.scene_translator.translate(self._layout_tree(tree, seed))

    def build_outline(self, raw: Any) -> str:
        return self.markdown_translator.translate(self.normalizer.normalize(raw))

    def _layout_tree(self, tree: MindMapTree, seed: Optional[int]) -> LayoutResult:
        result = self.layout_engine.layout(tree, seed=seed)
        if result.exhausted_ids:
            logger.warning(
                f"Collision repair exhausted for {len(result.exhausted_ids)} node(s); "
                f"rendering with overlap: {', '.join(result.exhausted_ids)}"
            )
        logger.info(f"Laid out mind map '{tree.center.label}' with {len(tree.nodes)} nodes")
        return result
