"""Prompt construction for documentation generation."""

from .builder import PromptBuilder
from .constants import OUTPUT_SECTIONS

__all__ = ["OUTPUT_SECTIONS", "PromptBuilder"]
