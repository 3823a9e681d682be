"""
Markdown Translator

Renders a normalized MindMapTree as a plain Markdown outline, for copying
a mind map as text.
"""

from typing import List

from schemas.mind_map import MindMapNode, MindMapTree, NodeLevel


class MarkdownTranslator:
    """Deterministic outline export: headings for center/branches, bullets below."""

    def __init__(self, indent: str = "  "):
        self.indent = indent

    def translate(self, tree: MindMapTree) -> str:
        center = tree.center
        if center is None:
            return ""

        lines: List[str] = [f"# {center.label}", ""]
        if center.description:
            lines += [center.description, ""]

        for index, branch in enumerate(tree.children_of(center.id), start=1):
            lines += [f"## {index}. {branch.label}", ""]
            if self._extra_description(branch):
                lines += [branch.description, ""]

            for concept in tree.children_of(branch.id):
                self._add_bullets(tree, concept, lines)
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    def _add_bullets(self, tree: MindMapTree, node: MindMapNode, lines: List[str]) -> None:
        depth = int(node.level) - int(NodeLevel.CONCEPT)
        prefix = self.indent * depth
        label = f"**{node.label}**" if node.level == NodeLevel.CONCEPT else node.label
        lines.append(f"{prefix}- {label}")
        if self._extra_description(node):
            lines.append(f"{prefix}{self.indent}{node.description}")

        for child in tree.children_of(node.id):
            self._add_bullets(tree, child, lines)

    @staticmethod
    def _extra_description(node: MindMapNode) -> bool:
        return bool(node.description) and node.description != node.label
