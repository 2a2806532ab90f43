"""Data-flow layering and auxiliary file categories."""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..models import DataFlowInfo, SourceFile
from .utils import has_suffix, has_token_prefix, path_tokens

MAX_LAYER_FILES = 10
MAX_CATEGORY_FILES = 10

PRESENTATION_KEYWORDS = ("component", "page", "view", "ui", "screen", "template")
PRESENTATION_SUFFIXES = (".jsx", ".tsx", ".vue", ".svelte", ".html")
APPLICATION_KEYWORDS = (
    "controller",
    "service",
    "handler",
    "middleware",
    "util",
    "helper",
    "business",
    "logic",
)
DATA_KEYWORDS = (
    "model",
    "entity",
    "repository",
    "dao",
    "db",
    "database",
    "schema",
    "migration",
    "query",
)

TEST_KEYWORDS = ("test", "spec")
CONFIG_KEYWORDS = ("config", "setting", "env", "docker", "webpack", "babel")
UI_SUFFIXES = PRESENTATION_SUFFIXES + (".css", ".scss")
UI_KEYWORDS = ("component", "view", "page", "screen", "ui")
SECURITY_KEYWORDS = ("auth", "security", "permission", "role", "login", "password")


def layer_of(path: str) -> Optional[str]:
    """Return ``presentation``, ``application``, ``data`` or ``None``."""
    tokens = path_tokens(path)
    if has_token_prefix(tokens, PRESENTATION_KEYWORDS) or has_suffix(path, PRESENTATION_SUFFIXES):
        return "presentation"
    if has_token_prefix(tokens, APPLICATION_KEYWORDS):
        return "application"
    if has_token_prefix(tokens, DATA_KEYWORDS):
        return "data"
    return None


def analyze_data_flow(files: Sequence[SourceFile]) -> DataFlowInfo:
    info = DataFlowInfo()
    buckets = {
        "presentation": info.presentation_layer,
        "application": info.application_layer,
        "data": info.data_layer,
    }
    for source_file in files:
        layer = layer_of(source_file.path)
        if layer is None:
            continue
        bucket = buckets[layer]
        if len(bucket) < MAX_LAYER_FILES:
            bucket.append(source_file.path)
    return info


def is_test_file(path: str) -> bool:
    return has_token_prefix(path_tokens(path), TEST_KEYWORDS)


def is_config_file(path: str) -> bool:
    return has_token_prefix(path_tokens(path.rsplit("/", 1)[-1]), CONFIG_KEYWORDS)


def is_ui_file(path: str) -> bool:
    return has_token_prefix(path_tokens(path), UI_KEYWORDS) or has_suffix(path, UI_SUFFIXES)


def is_security_file(path: str) -> bool:
    return has_token_prefix(path_tokens(path), SECURITY_KEYWORDS)


def categorize(files: Sequence[SourceFile]) -> dict[str, List[str]]:
    """Collect the test/config/ui/security lists; a file may land in several."""
    categories: dict[str, List[str]] = {
        "test_files": [],
        "config_files": [],
        "ui_files": [],
        "security_files": [],
    }
    predicates = (
        ("test_files", is_test_file),
        ("config_files", is_config_file),
        ("ui_files", is_ui_file),
        ("security_files", is_security_file),
    )
    for source_file in files:
        for key, predicate in predicates:
            bucket = categories[key]
            if len(bucket) < MAX_CATEGORY_FILES and predicate(source_file.path):
                bucket.append(source_file.path)
    return categories


__all__ = [
    "MAX_CATEGORY_FILES",
    "MAX_LAYER_FILES",
    "analyze_data_flow",
    "categorize",
    "is_config_file",
    "is_security_file",
    "is_test_file",
    "is_ui_file",
    "layer_of",
]
