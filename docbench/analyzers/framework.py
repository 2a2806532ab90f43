"""Framework detection from manifest dependencies and file names."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from ..models import PackageInfo, SourceFile

UNKNOWN = "Unknown"
CUSTOM = "Custom"

# Order matters: the first match wins.
DEPENDENCY_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("next", "Next.js"),
    ("react", "React"),
    ("vue", "Vue.js"),
    ("svelte", "Svelte"),
    ("@angular/core", "Angular"),
    ("express", "Express.js"),
    ("fastapi", "FastAPI"),
    ("django", "Django"),
    ("flask", "Flask"),
    ("spring-boot", "Spring Boot"),
)

FILENAME_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("next.config", "Next.js"),
    ("nuxt.config", "Nuxt.js"),
    ("vite.config", "Vite"),
    ("webpack.config", "Webpack"),
    ("package.json", "Node.js"),
    ("requirements.txt", "Python"),
    ("pom.xml", "Maven/Java"),
    ("cargo.toml", "Rust/Cargo"),
    ("go.mod", "Go"),
)


def detect_framework(
    package_info: Optional[PackageInfo],
    files: Sequence[SourceFile],
) -> str:
    if package_info is None and not files:
        return UNKNOWN

    if package_info is not None:
        dependencies = package_info.dependencies
        for dependency, framework in DEPENDENCY_FRAMEWORKS:
            if dependency in dependencies:
                return framework

    paths = [source_file.path.lower() for source_file in files]
    for marker, framework in FILENAME_FRAMEWORKS:
        if any(marker in path for path in paths):
            return framework
    return CUSTOM


__all__ = ["CUSTOM", "UNKNOWN", "detect_framework"]
