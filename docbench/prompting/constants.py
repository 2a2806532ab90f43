"""Shared constants for documentation prompts."""

from __future__ import annotations

PROMPT_TEMPLATE = "readme_prompt.j2"

MAX_PROMPT_FILES = 12
MAX_TREE_ENTRIES = 50
MIN_EXCERPT_CHARS = 200
MAX_EXCERPT_CHARS = 800
MAX_OUTPUT_TOKENS = 4000
OUTPUT_TOKEN_RATIO = 0.8

OUTPUT_SECTIONS: tuple[tuple[str, str], ...] = (
    ("Project Overview", "Brief description of what the project does"),
    ("Architecture", "High-level architecture and design patterns used"),
    ("Technologies Used", "List of frameworks, libraries, and technologies"),
    ("Project Structure", "Directory structure and file organization"),
    ("Key Features", "Main functionality and features"),
    ("Setup Instructions", "How to install and run the project"),
    ("API Documentation", "If applicable, document main APIs/endpoints"),
    ("Usage Examples", "Code examples showing how to use the project"),
    ("Contributing Guidelines", "How others can contribute"),
    ("Dependencies", "List of main dependencies and their purposes"),
)


__all__ = [
    "MAX_EXCERPT_CHARS",
    "MAX_OUTPUT_TOKENS",
    "MAX_PROMPT_FILES",
    "MAX_TREE_ENTRIES",
    "MIN_EXCERPT_CHARS",
    "OUTPUT_SECTIONS",
    "OUTPUT_TOKEN_RATIO",
    "PROMPT_TEMPLATE",
]
