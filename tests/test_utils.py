"""Tests for services/node_id.py and utils/color.py."""

import pytest

from services.node_id import generate_path_id, unique_id
from utils.color import coerce_color, is_hex_color, normalize_hex, with_alpha


class TestPathIds:
    def test_generate(self):
        assert generate_path_id(None, 5) == "1"
        assert generate_path_id("1", 0) == "1.1"
        assert generate_path_id("1.3", 1) == "1.3.2"

    def test_unique_id(self):
        assert unique_id("1.2", set()) == "1.2"
        assert unique_id("1.2", {"1.2"}) == "1.2-2"
        assert unique_id("1.2", {"1.2", "1.2-2"}) == "1.2-3"


class TestColor:
    def test_is_hex_color(self):
        assert is_hex_color("#abc")
        assert is_hex_color("#A1B2C3")
        assert not is_hex_color("#abcd")
        assert not is_hex_color("blue")
        assert not is_hex_color(None)

    def test_normalize(self):
        assert normalize_hex("#abc") == "#AABBCC"
        with pytest.raises(ValueError):
            normalize_hex("red")

    def test_with_alpha(self):
        assert with_alpha("#2563eb", 1.0) == "#2563EB"
        assert with_alpha("#2563EB", 0.8) == "#2563EBCC"
        assert with_alpha("#2563EB", 0.0) == "#2563EB00"
        assert with_alpha("#2563EB", 3) == "#2563EB"

    def test_coerce(self):
        assert coerce_color(" #fff ") == "#FFFFFF"
        assert coerce_color("green") is None
        assert coerce_color(12) is None
