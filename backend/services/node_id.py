"""
Hierarchical Node ID Service

Provides deterministic path IDs for mind map nodes in the format 1, 1.2, 1.2.3, etc.
The center topic is always "1"; every child appends its 1-based position
among its siblings, so the same raw tree always produces the same IDs.
"""

from typing import Optional, Set

CENTER_ID = "1"


def generate_path_id(parent_path: Optional[str], index: int) -> str:
    """
    Generate the path ID for the child at `index` (0-based) under `parent_path`.

    Args:
        parent_path: Path ID of the parent, or None for the center topic
        index: Position of the node among its siblings

    Returns:
        str: Path ID such as "1.3.2"
    """
    if parent_path is None:
        return CENTER_ID
    return f"{parent_path}.{index + 1}"


def unique_id(candidate: str, taken: Set[str]) -> str:
    """
    Return `candidate`, or `candidate-2`, `candidate-3`, ... if already taken.
    Does not modify `taken`.
    """
    if candidate not in taken:
        return candidate

    suffix = 2
    while f"{candidate}-{suffix}" in taken:
        suffix += 1
    return f"{candidate}-{suffix}"
