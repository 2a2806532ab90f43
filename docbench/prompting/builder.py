"""Builds documentation prompts from analyzed project metadata."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader

from ..models import ModelSpec, ProjectInfo, SourceFile
from .constants import (
    MAX_EXCERPT_CHARS,
    MAX_OUTPUT_TOKENS,
    MAX_PROMPT_FILES,
    MAX_TREE_ENTRIES,
    MIN_EXCERPT_CHARS,
    OUTPUT_SECTIONS,
    OUTPUT_TOKEN_RATIO,
    PROMPT_TEMPLATE,
)


@dataclass(frozen=True)
class Excerpt:
    path: str
    language: str
    fence: str
    content: str


class PromptBuilder:
    """Renders one prompt per model token ceiling.

    Rendering is pure: the same project, files and model always produce the
    same text, so every provider is compared on identical input.
    """

    SYSTEM_PROMPT = (
        "You are a senior developer documentation writer. Stay grounded in the supplied source. "
        "Never invent commands, files or dependencies."
    )

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        max_files: int = MAX_PROMPT_FILES,
        tree_limit: int = MAX_TREE_ENTRIES,
    ) -> None:
        self.templates_dir = templates_dir
        self.max_files = max_files
        self.tree_limit = tree_limit
        self._env = self._create_env(templates_dir)

    def build(self, project_info: ProjectInfo, files: Sequence[SourceFile], model: ModelSpec) -> str:
        """Render the prompt for ``model``'s token ceiling."""
        excerpt_chars = self.excerpt_chars(model.max_tokens)
        tree, remaining = self._structure_tree(project_info)
        template = self._env.get_template(PROMPT_TEMPLATE)
        return template.render(
            project=project_info,
            package=project_info.package_info,
            tree=tree,
            tree_remaining=remaining,
            layers=self._layers(project_info),
            excerpts=[
                Excerpt(
                    path=source_file.path,
                    language=source_file.language,
                    fence=_fence(source_file.language),
                    content=source_file.content[:excerpt_chars],
                )
                for source_file in files[: self.max_files]
            ],
            sections=OUTPUT_SECTIONS,
        ).strip() + "\n"

    @staticmethod
    def excerpt_chars(max_tokens: int) -> int:
        return max(MIN_EXCERPT_CHARS, min(MAX_EXCERPT_CHARS, max_tokens // 10))

    @staticmethod
    def output_tokens(max_tokens: int) -> int:
        return min(MAX_OUTPUT_TOKENS, math.floor(max_tokens * OUTPUT_TOKEN_RATIO))

    def _structure_tree(self, project_info: ProjectInfo) -> Tuple[List[str], int]:
        paths = {f"{directory}/" for directory in project_info.structure.directories}
        paths.update(entry.path for entry in project_info.structure.files)
        ordered = sorted(paths, key=lambda item: item.rstrip("/"))

        lines: List[str] = []
        for path in ordered[: self.tree_limit]:
            trimmed = path.rstrip("/")
            depth = trimmed.count("/")
            name = trimmed.rsplit("/", 1)[-1] + ("/" if path.endswith("/") else "")
            lines.append(f"{'  ' * depth}- {name}")
        return lines, max(0, len(ordered) - self.tree_limit)

    @staticmethod
    def _layers(project_info: ProjectInfo) -> List[Tuple[str, List[str]]]:
        flow = project_info.data_flow
        candidates = (
            ("Presentation", flow.presentation_layer),
            ("Application", flow.application_layer),
            ("Data", flow.data_layer),
        )
        return [(label, paths) for label, paths in candidates if paths]

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        loader = FileSystemLoader(directories)
        return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def _fence(language: str) -> str:
    label = language.lower()
    if "/" in label:
        label = label.split("/", 1)[1]
    return label.replace("#", "sharp").replace("+", "p").replace(" ", "")


__all__ = ["Excerpt", "PromptBuilder"]
