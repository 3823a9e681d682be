"""Shared fixtures for the mind map layout test suite."""

import pytest

from schemas.mind_map_config import LayoutConfig, MindMapSettings, NormalizerConfig, StyleConfig
from services.mind_map_pipeline import MindMapPipeline
from services.radial_layout import RadialLayoutEngine
from services.tree_normalizer import TreeNormalizer
from translators.scene_translator import SceneTranslator


@pytest.fixture
def style():
    return StyleConfig()


@pytest.fixture
def normalizer(style):
    return TreeNormalizer(NormalizerConfig(), style)


@pytest.fixture
def engine(style):
    return RadialLayoutEngine(LayoutConfig(), style)


@pytest.fixture
def translator(style):
    return SceneTranslator(style)


@pytest.fixture
def pipeline():
    return MindMapPipeline(MindMapSettings())


@pytest.fixture
def photosynthesis_raw():
    """A realistic, slightly messy model response already parsed from JSON."""
    return {
        "center": {"label": "Photosynthesis", "description": "How plants turn light into food"},
        "branches": [
            {
                "id": "light",
                "label": "Light Reactions",
                "color": "#2563EB",
                "concepts": [
                    {
                        "label": "Chlorophyll",
                        "description": "Pigment that absorbs light",
                        "points": [
                            {"label": "Chlorophyll a", "details": [{"label": "Absorbs red"}]},
                            {"label": "Chlorophyll b"},
                        ],
                    },
                    {"label": "Water splitting", "points": []},
                ],
            },
            {
                "label": "Calvin Cycle",
                "concepts": [
                    {"label": "Carbon fixation", "points": [{"label": "RuBisCO"}]},
                ],
            },
            {"label": "Importance"},
        ],
    }


def chain_raw(branches=1, concepts=1, points=1, details=1):
    """Uniform tree with the given fan-out at every level."""
    return {
        "center": {"label": "Center"},
        "branches": [
            {
                "label": f"Branch {b}",
                "concepts": [
                    {
                        "label": f"Concept {b}.{c}",
                        "points": [
                            {
                                "label": f"Point {b}.{c}.{p}",
                                "details": [{"label": f"Detail {b}.{c}.{p}.{d}"} for d in range(details)],
                            }
                            for p in range(points)
                        ],
                    }
                    for c in range(concepts)
                ],
            }
            for b in range(branches)
        ],
    }


@pytest.fixture
def make_raw():
    return chain_raw
