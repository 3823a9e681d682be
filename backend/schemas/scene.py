"""
Scene Schema

Renderer-agnostic description of a positioned mind map: circle and line
primitives plus a metadata side table for interactive lookups. This document
is the only contract between the layout core and any renderer.
"""

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

SCENE_SCHEMA_VERSION = "1.0"


class CirclePrimitive(BaseModel):
    """One node circle with its truncated label."""
    model_config = ConfigDict(frozen=True)

    id: str
    x: float
    y: float
    radius: float
    fill_color: str
    stroke_color: str
    stroke_width: float
    display_label: str
    text_size: int
    text_color: str
    level: int


class LinePrimitive(BaseModel):
    """One parent -> child connector, colored by the child's branch."""
    model_config = ConfigDict(frozen=True)

    from_id: str
    to_id: str
    color: str
    stroke_width: float = 1.0
    opacity: float = 1.0


class NodeMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: Optional[str] = None
    level: int
    child_count: int = 0


class SceneBounds(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


class SceneInfo(BaseModel):
    """Scene-level summary shown alongside the drawing."""
    model_config = ConfigDict(frozen=True)

    title: str = ""
    node_count: int = 0
    edge_count: int = 0
    schema_version: str = SCENE_SCHEMA_VERSION


class MindMapScene(BaseModel):
    # Tuples keep the collections as immutable as the frozen primitives
    model_config = ConfigDict(frozen=True)

    circles: Tuple[CirclePrimitive, ...] = ()
    lines: Tuple[LinePrimitive, ...] = ()
    nodes: Tuple[NodeMetadata, ...] = ()
    bounds: SceneBounds = Field(default_factory=SceneBounds)
    metadata: SceneInfo = Field(default_factory=SceneInfo)

    def node_metadata(self, node_id: str) -> Optional[NodeMetadata]:
        for meta in self.nodes:
            if meta.id == node_id:
                return meta
        return None

    def circle(self, node_id: str) -> Optional[CirclePrimitive]:
        for circle in self.circles:
            if circle.id == node_id:
                return circle
        return None
