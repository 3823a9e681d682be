"""
Deterministic Translator Layer

Converts positioned MindMapTree objects to the scene description and to text outlines.
All rendering logic is deterministic and separate from the LLM.
"""

from .scene_translator import SceneTranslator, SceneTranslatorError, truncate_label
from .markdown_translator import MarkdownTranslator

__all__ = ['SceneTranslator', 'SceneTranslatorError', 'truncate_label', 'MarkdownTranslator']
