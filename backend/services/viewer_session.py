"""
Viewer Session

Reference model of the interactive behavior a renderer provides over a
MindMapScene: pan, clamped multiplicative zoom, node selection and
fit-to-view. State is local to one viewer and never persisted.
"""

import math
from typing import Optional, Tuple

from pydantic import BaseModel

from schemas.mind_map_config import ViewerConfig
from schemas.scene import MindMapScene, NodeMetadata


class ViewTransform(BaseModel):
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0


class ViewerSession:

    def __init__(self, scene: MindMapScene, config: Optional[ViewerConfig] = None):
        self.scene = scene
        self.config = config or ViewerConfig()
        self.transform = ViewTransform(scale=self._clamp(self.config.initial_scale))
        self.selected_id: Optional[str] = None
        self._drag_origin: Optional[Tuple[float, float]] = None

    # ---------- pan ----------

    def pan(self, dx: float, dy: float) -> ViewTransform:
        self.transform = self.transform.model_copy(
            update={"x": self.transform.x + dx, "y": self.transform.y + dy}
        )
        return self.transform

    def begin_drag(self, screen_x: float, screen_y: float) -> None:
        self._drag_origin = (screen_x, screen_y)

    def drag_to(self, screen_x: float, screen_y: float) -> ViewTransform:
        if self._drag_origin is None:
            return self.transform
        start_x, start_y = self._drag_origin
        self._drag_origin = (screen_x, screen_y)
        return self.pan(screen_x - start_x, screen_y - start_y)

    def end_drag(self) -> None:
        self._drag_origin = None

    @property
    def dragging(self) -> bool:
        return self._drag_origin is not None

    # ---------- zoom ----------

    def zoom_in(self) -> ViewTransform:
        return self._set_scale(self.transform.scale * self.config.zoom_factor)

    def zoom_out(self) -> ViewTransform:
        return self._set_scale(self.transform.scale / self.config.zoom_factor)

    def wheel(self, delta_y: float) -> ViewTransform:
        """Scroll down (positive delta) zooms out, scroll up zooms in."""
        if delta_y > 0:
            return self.zoom_out()
        if delta_y < 0:
            return self.zoom_in()
        return self.transform

    def fit_to_view(self, viewport_width: float, viewport_height: float) -> ViewTransform:
        """
        Scale so the whole scene fits the viewport (with padding) and center
        it. A single-node scene resets to the initial scale.
        """
        bounds = self.scene.bounds
        if len(self.scene.circles) <= 1 or bounds.width <= 0 or bounds.height <= 0:
            self.transform = ViewTransform(scale=self._clamp(self.config.initial_scale))
            return self.transform

        scale = min(viewport_width / bounds.width, viewport_height / bounds.height) * self.config.fit_padding
        scale = self._clamp(scale)
        mid_x = (bounds.min_x + bounds.max_x) / 2
        mid_y = (bounds.min_y + bounds.max_y) / 2
        self.transform = ViewTransform(
            x=viewport_width / 2 - mid_x * scale,
            y=viewport_height / 2 - mid_y * scale,
            scale=scale,
        )
        return self.transform

    # ---------- selection ----------

    def click(self, scene_x: float, scene_y: float) -> Optional[str]:
        """
        Click at scene coordinates. Clicking a node toggles its selection;
        clicking empty space clears it. Returns the selected id.
        """
        hit = self.hit_test(scene_x, scene_y)
        if hit is None or hit == self.selected_id:
            self.selected_id = None
        else:
            self.selected_id = hit
        return self.selected_id

    def click_screen(self, screen_x: float, screen_y: float) -> Optional[str]:
        return self.click(*self.screen_to_scene(screen_x, screen_y))

    def close_details(self) -> None:
        self.selected_id = None

    def details(self) -> Optional[NodeMetadata]:
        if self.selected_id is None:
            return None
        return self.scene.node_metadata(self.selected_id)

    def hit_test(self, scene_x: float, scene_y: float) -> Optional[str]:
        # Later circles are drawn on top
        for circle in reversed(self.scene.circles):
            if math.hypot(scene_x - circle.x, scene_y - circle.y) <= circle.radius:
                return circle.id
        return None

    def screen_to_scene(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        t = self.transform
        return (screen_x - t.x) / t.scale, (screen_y - t.y) / t.scale

    # ---------- internals ----------

    def _set_scale(self, scale: float) -> ViewTransform:
        self.transform = self.transform.model_copy(update={"scale": self._clamp(scale)})
        return self.transform

    def _clamp(self, scale: float) -> float:
        return max(self.config.min_scale, min(self.config.max_scale, scale))
