"""Tests for GitHub repository ingestion with a fake transport."""

from __future__ import annotations

import json

import pytest

from docbench.config import IngestionLimits
from docbench.errors import InvalidRepositoryURL, RateLimited, RepositoryUnavailable
from docbench.ingestion import GitHubClient, RemoteResponse, ingest_repository, parse_repository_url
from tests._fixtures.fakes import API, FakeGitHub, dir_item, file_item, json_response

REPO_URL = "https://github.com/acme/widget"


def _client(routes) -> tuple[GitHubClient, FakeGitHub]:
    fake = FakeGitHub(routes)
    return GitHubClient(transport=fake), fake


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/acme/widget",
        "https://github.com/acme/widget.git",
        "https://github.com/acme/widget/tree/main/src",
        "git@github.com:acme/widget.git",
        "www.github.com/acme/widget",
    ],
)
def test_parse_repository_url_variants(url: str) -> None:
    ref = parse_repository_url(url)
    assert (ref.owner, ref.repo) == ("acme", "widget")


@pytest.mark.parametrize(
    "url",
    [
        "https://gitlab.com/acme/widget",
        "https://notgithub.com/acme/widget",
        "https://example.com/github.com/acme/widget",
    ],
)
def test_parse_repository_url_rejects_other_hosts(url: str) -> None:
    with pytest.raises(InvalidRepositoryURL):
        parse_repository_url(url)


def test_ingest_repository_traverses_and_filters() -> None:
    manifest = {"name": "widget-js", "dependencies": {"react": "18"}}
    client, fake = _client(
        {
            API: json_response(
                [
                    file_item("README.md"),
                    file_item("package.json"),
                    dir_item("src"),
                    dir_item("node_modules"),
                    file_item("logo.png"),
                ],
                headers={"X-RateLimit-Remaining": "42"},
            ),
            f"{API}/src": json_response([file_item("src/index.js"), file_item("src/Util.js")]),
            "https://raw.example/README.md": b"# Widget\n",
            "https://raw.example/package.json": json.dumps(manifest).encode("utf-8"),
            "https://raw.example/src/index.js": b"import React from 'react'\n",
            "https://raw.example/src/Util.js": b"export const add = (a, b) => a + b\n",
        }
    )

    result = ingest_repository(REPO_URL, client=client)

    assert [source.path for source in result.files] == [
        "README.md",
        "package.json",
        "src/index.js",
        "src/Util.js",
    ]
    assert result.project_info.name == "widget-js"
    assert result.project_info.framework == "React"
    assert result.source == "repository"
    assert f"{API}/node_modules" not in fake.urls
    assert "https://raw.example/logo.png" not in fake.urls


def test_repository_name_is_used_without_manifest() -> None:
    client, _ = _client(
        {
            API: json_response([file_item("main.py")]),
            "https://raw.example/main.py": b"print('hi')\n",
        }
    )

    result = ingest_repository(REPO_URL, client=client)

    assert result.project_info.name == "widget"


def test_per_directory_and_total_caps() -> None:
    root_files = [file_item(f"mod{index}.py") for index in range(4)]
    routes = {
        API: json_response(root_files + [dir_item("lib")]),
        f"{API}/lib": json_response([file_item("lib/a.py"), file_item("lib/b.py")]),
    }
    for path in ["mod0.py", "mod1.py", "mod2.py", "mod3.py", "lib/a.py", "lib/b.py"]:
        routes[f"https://raw.example/{path}"] = b"value = 1\n"
    client, _ = _client(routes)

    per_directory = ingest_repository(
        REPO_URL,
        IngestionLimits(remote_max_files_per_directory=2),
        client=client,
    )
    assert [source.path for source in per_directory.files] == ["mod0.py", "mod1.py", "lib/a.py", "lib/b.py"]

    total = ingest_repository(REPO_URL, IngestionLimits(remote_max_files=3), client=client)
    assert total.project_info.file_count == 3


def test_large_files_are_not_downloaded() -> None:
    client, fake = _client(
        {
            API: json_response([file_item("huge.py", size=500_000), file_item("ok.py")]),
            "https://raw.example/ok.py": b"ok = 1\n",
        }
    )

    result = ingest_repository(REPO_URL, client=client)

    assert [source.path for source in result.files] == ["ok.py"]
    assert "https://raw.example/huge.py" not in fake.urls


def test_listing_follows_next_links() -> None:
    client, _ = _client(
        {
            API: json_response(
                [file_item("one.py")],
                headers={"Link": f'<{API}?page=2>; rel="next", <{API}?page=2>; rel="last"'},
            ),
            f"{API}?page=2": json_response([file_item("two.py")]),
            "https://raw.example/one.py": b"one = 1\n",
            "https://raw.example/two.py": b"two = 2\n",
        }
    )

    result = ingest_repository(REPO_URL, client=client)

    assert [source.path for source in result.files] == ["one.py", "two.py"]


def test_rate_limit_without_files_is_fatal() -> None:
    client, _ = _client({API: RemoteResponse(status=403, headers={}, body=b"{}")})

    with pytest.raises(RateLimited):
        ingest_repository(REPO_URL, client=client)


def test_rate_limit_after_files_keeps_partial_set() -> None:
    client, _ = _client(
        {
            API: json_response([file_item("README.md"), dir_item("src")]),
            "https://raw.example/README.md": b"# Widget\n",
            f"{API}/src": RemoteResponse(status=429, headers={}, body=b"{}"),
        }
    )

    result = ingest_repository(REPO_URL, client=client)

    assert [source.path for source in result.files] == ["README.md"]
    assert any("rate limit" in warning.lower() for warning in result.warnings)


def test_missing_repository_is_unavailable() -> None:
    client, _ = _client({})

    with pytest.raises(RepositoryUnavailable):
        ingest_repository(REPO_URL, client=client)


def test_failing_subdirectory_and_download_are_skipped() -> None:
    client, _ = _client(
        {
            API: json_response([file_item("gone.py"), file_item("main.py"), dir_item("broken")]),
            "https://raw.example/main.py": b"main = 1\n",
            f"{API}/broken": RemoteResponse(status=500, headers={}, body=b"{}"),
        }
    )

    result = ingest_repository(REPO_URL, client=client)

    assert [source.path for source in result.files] == ["main.py"]
    assert any("broken" in warning for warning in result.warnings)


def test_token_is_sent_as_authorization_header() -> None:
    fake = FakeGitHub(
        {
            API: json_response([file_item("main.py")]),
            "https://raw.example/main.py": b"main = 1\n",
        }
    )
    client = GitHubClient("secret", transport=fake)

    ingest_repository(REPO_URL, client=client)

    assert fake.requests[0].get_header("Authorization") == "token secret"
