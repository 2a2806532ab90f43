"""Tests for upload and directory ingestion."""

from __future__ import annotations

import json

import pytest

from docbench.config import IngestionLimits
from docbench.errors import NoSupportedFiles
from docbench.ingestion import DEFAULT_UPLOAD_NAME, UploadedFile, ingest_directory, ingest_files


def test_node_modules_are_excluded_from_uploads() -> None:
    uploads = [
        UploadedFile.from_bytes("index.js", "console.log('hi')\n"),
        UploadedFile.from_bytes("README.md", "# Demo\n"),
        UploadedFile.from_bytes("node_modules/x.js", "module.exports = 1\n"),
    ]

    result = ingest_files(uploads)

    info = result.project_info
    assert [source.path for source in result.files] == ["index.js", "README.md"]
    assert info.file_count == 2
    assert set(info.languages) == {"JavaScript", "Markdown"}
    assert info.name == DEFAULT_UPLOAD_NAME
    assert result.source == "upload"


def test_upload_name_comes_from_first_nested_segment() -> None:
    uploads = [
        UploadedFile.from_bytes("my-app/src/index.ts", "export {}\n"),
        UploadedFile.from_bytes("my-app/README.md", "# App\n"),
    ]

    result = ingest_files(uploads)

    assert result.project_info.name == "my-app"
    assert "my-app/src" in result.project_info.structure.directories


def test_manifest_name_overrides_path_name() -> None:
    manifest = json.dumps({"name": "foo", "version": "1.2.3", "dependencies": {"express": "^4"}})
    uploads = [
        UploadedFile.from_bytes("bar/package.json", manifest),
        UploadedFile.from_bytes("bar/server.js", "app.get('/users', handler)\n"),
    ]

    result = ingest_files(uploads)

    info = result.project_info
    assert info.name == "foo"
    assert info.package_info is not None
    assert info.package_info.version == "1.2.3"
    assert info.framework == "Express.js"
    assert info.package_info.framework == "Express.js"


def test_invalid_manifest_is_ignored() -> None:
    uploads = [
        UploadedFile.from_bytes("package.json", "{not json"),
        UploadedFile.from_bytes("main.py", "print('ok')\n"),
    ]

    result = ingest_files(uploads)

    assert result.project_info.package_info is None
    assert result.project_info.name == DEFAULT_UPLOAD_NAME
    assert result.project_info.file_count == 2


def test_unsafe_and_unsupported_paths_are_skipped() -> None:
    uploads = [
        UploadedFile.from_bytes("../secret.py", "token = 1\n"),
        UploadedFile.from_bytes("image.png", b"\x89PNG"),
        UploadedFile.from_bytes("src/__pycache__/mod.py", "cached\n"),
        UploadedFile.from_bytes("src/mod.py", "value = 1\n"),
    ]

    result = ingest_files(uploads)

    assert [source.path for source in result.files] == ["src/mod.py"]


def test_caps_on_file_count_size_and_content() -> None:
    limits = IngestionLimits(max_files=3, max_file_bytes=1000, max_content_chars=50)
    uploads = [UploadedFile.from_bytes(f"f{index}.py", "x" * 200) for index in range(5)]
    uploads.insert(0, UploadedFile.from_bytes("big.py", "y" * 5000))

    result = ingest_files(uploads, limits)

    assert len(result.files) == 3
    assert all(len(source.content) <= 50 for source in result.files)
    assert "big.py" not in [source.path for source in result.files]


def test_unreadable_upload_is_skipped() -> None:
    def _broken() -> bytes:
        raise OSError("disk gone")

    uploads = [
        UploadedFile(path="lost.py", read=_broken),
        UploadedFile.from_bytes("kept.py", "ok = True\n"),
    ]

    result = ingest_files(uploads)

    assert [source.path for source in result.files] == ["kept.py"]


def test_zero_eligible_files_is_fatal() -> None:
    uploads = [UploadedFile.from_bytes("yarn.lock", "lock"), UploadedFile.from_bytes("logo.png", b"\x00")]

    with pytest.raises(NoSupportedFiles):
        ingest_files(uploads)


def test_ingest_directory_walks_and_prunes(project_builder) -> None:
    root = project_builder.write(
        {
            "index.js": "console.log('hi')\n",
            "README.md": "# Demo\n",
            "node_modules/x.js": "module.exports = 1\n",
            ".git/config.json": "{}\n",
            "src/components/Button.tsx": "export const Button = () => null\n",
        }
    )

    result = ingest_directory(root)

    paths = [source.path for source in result.files]
    assert paths == ["README.md", "index.js", "src/components/Button.tsx"]
    assert result.project_info.name == "project"
    assert result.project_info.structure.directories == ["src", "src/components"]
    assert result.project_info.structure.depth == 2
    assert result.source == "directory"


def test_ingest_directory_respects_depth_bound(project_builder) -> None:
    root = project_builder.write(
        {
            "a/b/mid.py": "mid = 1\n",
            "a/b/c/deep.py": "deep = 1\n",
        }
    )

    result = ingest_directory(root, IngestionLimits(max_depth=2))

    assert [source.path for source in result.files] == ["a/b/mid.py"]


def test_ingest_directory_rejects_missing_path(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        ingest_directory(tmp_path / "missing")
