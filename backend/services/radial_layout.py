"""
Radial Layout Engine

Assigns every node of a normalized mind map a 2-D position using
level-specific angle/radius formulas, then repairs collisions by bounded
random perturbation. Randomness comes from a per-call seeded generator,
so the same tree and seed always produce the same layout.
"""

import logging
import math
import random
from collections import deque
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from schemas.mind_map import (
    MindMapNode, MindMapTree, NodeLevel, PlacedCircle, Position, validate_tree_structure
)
from schemas.mind_map_config import LayoutConfig, StyleConfig

logger = logging.getLogger(__name__)


class LayoutError(Exception):
    """Raised when a tree cannot be laid out (structural violations)"""
    pass


class LayoutResult(BaseModel):
    tree: MindMapTree
    placements: List[PlacedCircle] = Field(default_factory=list)
    # Nodes whose collision repair ran out of attempts
    exhausted_ids: List[str] = Field(default_factory=list)
    # Direction (radians) each node was placed at relative to its parent
    angles: Dict[str, float] = Field(default_factory=dict)


class RadialLayoutEngine:
    """
    Breadth-first radial placement.

    Level 1 branches sit on a circle around the center, level 2 concepts fan
    out around their branch direction, level 3 points are grouped in rings
    of bounded angular spread, level 4 details fan out narrowly.
    """

    def __init__(self, config: Optional[LayoutConfig] = None, style: Optional[StyleConfig] = None):
        self.config = config or LayoutConfig()
        self.style = style or StyleConfig()

    def layout(self, tree: MindMapTree, seed: Optional[int] = None) -> LayoutResult:
        """
        Position every node of `tree`. The input is not modified.

        Args:
            tree: Normalized mind map tree
            seed: Seed for collision repair; defaults to config.seed

        Returns:
            LayoutResult with a positioned copy of the tree
        """
        errors = validate_tree_structure(tree)
        if errors:
            raise LayoutError(f"Cannot lay out invalid tree: {'; '.join(errors)}")

        rng = random.Random(seed if seed is not None else self.config.seed)
        positioned = tree.model_copy(deep=True)

        children: Dict[str, List[MindMapNode]] = {n.id: [] for n in positioned.nodes}
        for node in positioned.nodes:
            if node.parent_id is not None:
                children[node.parent_id].append(node)

        center = positioned.center
        center.radius = self.style.radius_for(NodeLevel.CENTER)
        center.position = Position(x=0.0, y=0.0)

        placements = [PlacedCircle(id=center.id, x=0.0, y=0.0, radius=center.radius)]
        angles: Dict[str, float] = {center.id: 0.0}
        exhausted: List[str] = []

        queue = deque([center])
        while queue:
            parent = queue.popleft()
            kids = children[parent.id]

            for index, child in enumerate(kids):
                child.radius = self.style.radius_for(child.level)
                angle, distance = self.base_polar(child.level, index, len(kids), angles[parent.id])

                x, y, final_angle, ok = self._place(parent.position, angle, distance, child.radius, placements, rng)
                if not ok:
                    exhausted.append(child.id)

                child.position = Position(x=x, y=y)
                angles[child.id] = final_angle
                placements.append(PlacedCircle(id=child.id, x=x, y=y, radius=child.radius))
                queue.append(child)

        if exhausted:
            logger.debug(f"Collision repair exhausted for {len(exhausted)} of {len(placements)} nodes")

        return LayoutResult(tree=positioned, placements=placements, exhausted_ids=exhausted, angles=angles)

    def base_polar(self, level: int, index: int, count: int, parent_angle: float) -> Tuple[float, float]:
        """
        Base direction and distance (from the parent) for the child at
        `index` of `count` siblings.
        """
        cfg = self.config

        if level == NodeLevel.BRANCH:
            angle = 2 * math.pi * index / count
            distance = max(cfg.branch_min_radius, cfg.branch_radius_per_sibling * count)

        elif level == NodeLevel.CONCEPT:
            angle = parent_angle + (index - (count - 1) / 2) * cfg.concept_fan_step
            distance = max(cfg.concept_min_radius, cfg.concept_radius_per_sibling * count)

        elif level == NodeLevel.POINT:
            ring, slot = divmod(index, cfg.point_ring_size)
            in_ring = min(cfg.point_ring_size, count - ring * cfg.point_ring_size)
            distance = max(cfg.point_min_radius, cfg.point_ring_base + cfg.point_ring_step * ring)
            spread = min(cfg.point_max_spread, cfg.point_spread_per_item * in_ring)
            if in_ring == 1:
                angle = parent_angle
            else:
                angle = parent_angle - spread / 2 + slot * spread / (in_ring - 1)

        elif level == NodeLevel.DETAIL:
            angle = parent_angle + (index - (count - 1) / 2) * cfg.detail_fan_step
            distance = cfg.detail_distance

        else:
            raise LayoutError(f"Level {level} has no placement rule")

        return angle, distance

    def collides(self, x: float, y: float, radius: float, placements: List[PlacedCircle]) -> bool:
        margin = self.config.clearance
        for placed in placements:
            if math.hypot(x - placed.x, y - placed.y) < radius + placed.radius + margin:
                return True
        return False

    def _place(
        self,
        origin: Position,
        angle: float,
        distance: float,
        radius: float,
        placements: List[PlacedCircle],
        rng: random.Random,
    ) -> Tuple[float, float, float, bool]:
        """Returns (x, y, angle, collision_free)."""
        cfg = self.config
        x = origin.x + distance * math.cos(angle)
        y = origin.y + distance * math.sin(angle)
        if not self.collides(x, y, radius, placements):
            return x, y, angle, True

        candidate_angle = angle
        for _ in range(cfg.max_attempts):
            candidate_angle = angle + rng.uniform(-cfg.jitter_angle, cfg.jitter_angle)
            candidate_distance = distance + rng.uniform(cfg.jitter_min_distance, cfg.jitter_max_distance)
            x = origin.x + candidate_distance * math.cos(candidate_angle)
            y = origin.y + candidate_distance * math.sin(candidate_angle)
            if not self.collides(x, y, radius, placements):
                return x, y, candidate_angle, True

        # Out of attempts: keep the last candidate
        return x, y, candidate_angle, False
