"""Tests for services/tree_normalizer.py: defaulting, IDs, caps, fallbacks."""

import pytest

from schemas.mind_map import NodeLevel, validate_tree_structure
from schemas.mind_map_config import DEFAULT_PALETTE, NormalizerConfig, StyleConfig
from services.tree_normalizer import TreeNormalizer, parse_llm_response


class TestStructure:
    def test_breadth_first_order(self, normalizer, photosynthesis_raw):
        tree = normalizer.normalize(photosynthesis_raw)
        levels = [int(n.level) for n in tree.nodes]
        assert levels == sorted(levels)
        assert tree.nodes[0].level == NodeLevel.CENTER

    def test_tree_invariants_hold(self, normalizer, photosynthesis_raw):
        tree = normalizer.normalize(photosynthesis_raw)
        assert validate_tree_structure(tree) == []

        by_id = {n.id: n for n in tree.nodes}
        for node in tree.nodes[1:]:
            parent = by_id[node.parent_id]
            assert node.level == parent.level + 1

    def test_node_counts(self, normalizer, photosynthesis_raw):
        tree = normalizer.normalize(photosynthesis_raw)
        assert len(tree.nodes_at_level(1)) == 3
        assert len(tree.nodes_at_level(2)) == 3
        assert len(tree.nodes_at_level(3)) == 3
        assert len(tree.nodes_at_level(4)) == 1

    def test_radius_follows_level(self, normalizer, photosynthesis_raw):
        tree = normalizer.normalize(photosynthesis_raw)
        expected = {0: 50, 1: 40, 2: 32, 3: 24, 4: 18}
        for node in tree.nodes:
            assert node.radius == expected[int(node.level)]

    def test_no_positions_before_layout(self, normalizer, photosynthesis_raw):
        tree = normalizer.normalize(photosynthesis_raw)
        assert all(n.position is None for n in tree.nodes)


class TestIds:
    def test_path_ids_for_missing_ids(self, normalizer, photosynthesis_raw):
        tree = normalizer.normalize(photosynthesis_raw)
        assert tree.center.id == "1"
        assert tree.get("1.2").label == "Calvin Cycle"
        assert tree.get("1.2.1").label == "Carbon fixation"
        assert tree.get("1.2.1.1").label == "RuBisCO"

    def test_raw_id_kept_and_children_use_path(self, normalizer, photosynthesis_raw):
        tree = normalizer.normalize(photosynthesis_raw)
        light = tree.get("light")
        assert light.label == "Light Reactions"
        assert [c.id for c in tree.children_of("light")] == ["1.1.1", "1.1.2"]
        assert tree.get("1.1.1.1.1").label == "Absorbs red"

    def test_duplicate_raw_ids_replaced(self, normalizer):
        raw = {"center": {"label": "C"}, "branches": [{"id": "x", "label": "A"}, {"id": "x", "label": "B"}]}
        tree = normalizer.normalize(raw)
        assert [n.id for n in tree.nodes] == ["1", "x", "1.2"]

    def test_raw_id_clashing_with_path_id(self, normalizer):
        raw = {"center": {"label": "C"}, "branches": [{"id": "1.2", "label": "A"}, {"label": "B"}]}
        tree = normalizer.normalize(raw)
        ids = [n.id for n in tree.nodes]
        assert ids == ["1", "1.2", "1.2-2"]
        assert len(set(ids)) == len(ids)

    def test_center_raw_id_does_not_prefix_paths(self, normalizer):
        raw = {"center": {"id": "root", "label": "C"}, "branches": [{"label": "B", "concepts": [{"label": "K"}]}]}
        tree = normalizer.normalize(raw)
        assert [n.id for n in tree.nodes] == ["root", "1.1", "1.1.1"]
        assert tree.nodes[1].parent_id == "root"

    def test_numeric_id_coerced(self, normalizer):
        raw = {"center": {"label": "C"}, "branches": [{"id": 7, "label": "A"}]}
        tree = normalizer.normalize(raw)
        assert tree.nodes[1].id == "7"

    def test_repeatable(self, normalizer, photosynthesis_raw):
        first = normalizer.normalize(photosynthesis_raw)
        second = normalizer.normalize(photosynthesis_raw)
        assert first.model_dump() == second.model_dump()


class TestDefaults:
    def test_placeholder_labels(self, normalizer):
        raw = {
            "center": {"label": "C"},
            "branches": [{"concepts": [{"label": "   ", "points": [{"details": [{}]}]}]}],
        }
        tree = normalizer.normalize(raw)
        labels = [n.label for n in tree.nodes]
        assert labels == ["C", "Untitled Branch", "Untitled Concept", "Untitled Point", "Untitled Detail"]

    def test_center_without_label(self, normalizer):
        tree = normalizer.normalize({"center": {}})
        assert tree.center.label == "Untitled Topic"

    def test_description_cleanup(self, normalizer):
        raw = {"center": {"label": "C", "description": ""}, "branches": [{"label": "B", "description": 42}]}
        tree = normalizer.normalize(raw)
        assert tree.center.description is None
        assert tree.nodes[1].description == "42"

    def test_string_entries_become_labels(self, normalizer):
        raw = {"center": {"label": "C"}, "branches": [{"label": "B", "concepts": ["One", "Two", 3, None]}]}
        tree = normalizer.normalize(raw)
        assert [n.label for n in tree.nodes_at_level(2)] == ["One", "Two"]

    def test_title_used_when_label_is_null(self, normalizer):
        tree = normalizer.normalize({"center": {"label": None, "title": "Cells"}, "branches": [{"label": "", "title": "Nucleus"}]})
        assert [n.label for n in tree.nodes] == ["Cells", "Nucleus"]

    def test_center_as_string(self, normalizer):
        tree = normalizer.normalize({"center": "Cells", "branches": [{"label": "Organelles"}]})
        assert tree.center.label == "Cells"
        assert len(tree.nodes) == 2

    def test_root_children_alias(self, normalizer):
        raw = {"root": {"label": "Biology", "children": [{"label": "Cells", "children": [{"label": "Nucleus"}]}]}}
        tree = normalizer.normalize(raw)
        assert [n.label for n in tree.nodes] == ["Biology", "Cells", "Nucleus"]
        assert tree.nodes[2].level == NodeLevel.CONCEPT


class TestColors:
    def test_palette_rotation(self, normalizer, make_raw):
        tree = normalizer.normalize(make_raw(branches=8, concepts=0))
        assert [b.color for b in tree.nodes_at_level(1)] == DEFAULT_PALETTE

    def test_valid_raw_color_kept_and_normalized(self, normalizer):
        raw = {"center": {"label": "C"}, "branches": [{"label": "A", "color": "#abc"}, {"label": "B", "color": "blue"}]}
        tree = normalizer.normalize(raw)
        assert tree.nodes[1].color == "#AABBCC"
        assert tree.nodes[2].color == DEFAULT_PALETTE[1]

    def test_descendants_inherit_branch_color(self, normalizer, photosynthesis_raw):
        tree = normalizer.normalize(photosynthesis_raw)
        by_id = {n.id: n for n in tree.nodes}
        assert tree.center.color is None
        for node in tree.nodes:
            if node.level >= NodeLevel.CONCEPT:
                assert node.color == by_id[node.parent_id].color
        assert tree.get("1.1.1.1.1").color == "#2563EB"

    def test_custom_palette(self):
        normalizer = TreeNormalizer(style=StyleConfig(palette=["#000000"]))
        tree = normalizer.normalize({"center": {"label": "C"}, "branches": [{}, {}]})
        assert [n.color for n in tree.nodes_at_level(1)] == ["#000000", "#000000"]


class TestCaps:
    def test_default_caps(self, normalizer, make_raw):
        tree = normalizer.normalize(make_raw(branches=12, concepts=7, points=1, details=0))
        assert len(tree.nodes_at_level(1)) == 8
        assert len(tree.nodes_at_level(2)) == 8 * 5

    def test_point_and_detail_caps(self, normalizer, make_raw):
        tree = normalizer.normalize(make_raw(branches=1, concepts=1, points=9, details=6))
        assert len(tree.nodes_at_level(3)) == 5
        assert len(tree.nodes_at_level(4)) == 5 * 3

    def test_truncation_keeps_first_entries(self, normalizer, make_raw):
        tree = normalizer.normalize(make_raw(branches=10, concepts=0))
        assert tree.nodes_at_level(1)[-1].label == "Branch 7"

    def test_configured_caps(self, make_raw):
        config = NormalizerConfig(max_children={0: 2, 1: 1, 2: 1, 3: 0})
        tree = TreeNormalizer(config).normalize(make_raw(branches=4, concepts=3, points=3, details=3))
        counts = [len(tree.nodes_at_level(lvl)) for lvl in range(5)]
        assert counts == [1, 2, 2, 2, 0]

    def test_nothing_below_details(self, normalizer):
        deep = {"label": "D", "children": [{"label": "too deep", "children": [{"label": "deeper"}]}]}
        raw = {"center": {"label": "C"}, "branches": [{"concepts": [{"points": [{"details": [deep]}]}]}]}
        tree = normalizer.normalize(raw)
        assert len(tree.nodes) == 5
        assert max(int(n.level) for n in tree.nodes) == 4


class TestFallback:
    @pytest.mark.parametrize("raw", [None, [], "mind map", 42, {}, {"center": None}, {"center": ["x"]}])
    def test_unusable_input(self, normalizer, raw):
        tree = normalizer.normalize(raw)
        assert len(tree.nodes) == 1
        assert tree.center.label == "Mind Map"
        assert tree.center.id == "1"

    def test_branches_not_a_list(self, normalizer):
        tree = normalizer.normalize({"center": {"label": "Photosynthesis"}, "branches": "oops"})
        assert len(tree.nodes) == 1
        assert tree.center.label == "Photosynthesis"

    def test_concepts_not_a_list(self, normalizer):
        tree = normalizer.normalize({"center": {"label": "C"}, "branches": [{"label": "B", "concepts": {"a": 1}}]})
        assert [n.label for n in tree.nodes] == ["C", "B"]

    def test_custom_fallback_label(self):
        normalizer = TreeNormalizer(NormalizerConfig(fallback_label="Lesson"))
        assert normalizer.normalize(None).center.label == "Lesson"


class TestParseLlmResponse:
    def test_fenced_json_with_trailing_commas(self):
        text = 'Here you go:\n```json\n{"center": {"label": "Cells",}, "branches": [{"label": "A"},],}\n```'
        parsed = parse_llm_response(text)
        assert parsed == {"center": {"label": "Cells"}, "branches": [{"label": "A"}]}

    def test_valid_json_strings_left_untouched(self):
        text = '{"center": {"label": "Lists [a, b, ]", "description": "Sets {x, }"}}'
        parsed = parse_llm_response(text)
        assert parsed == {"center": {"label": "Lists [a, b, ]", "description": "Sets {x, }"}}

    def test_surrounding_prose(self):
        parsed = parse_llm_response('Sure! {"center": {"label": "X"}} Hope this helps.')
        assert parsed == {"center": {"label": "X"}}

    @pytest.mark.parametrize("text", ["", "no json here", "[1, 2]", '{"center": ', None])
    def test_unparseable(self, text):
        assert parse_llm_response(text) is None

    def test_normalize_text(self, normalizer):
        tree = normalizer.normalize_text('```\n{"center": {"label": "Cells"}, "branches": [{"label": "A"}]}\n```')
        assert [n.label for n in tree.nodes] == ["Cells", "A"]

    def test_normalize_text_fallback(self, normalizer):
        tree = normalizer.normalize_text("the model refused")
        assert len(tree.nodes) == 1
