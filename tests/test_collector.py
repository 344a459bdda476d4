"""Pagination 수집 로직 테스트."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any
from unittest.mock import MagicMock, call

import pytest

from drone_bar.collector import CollectStats, collect_all, collect_builds
from drone_bar.config import AppConfig
from drone_bar.errors import DroneAuthError
from drone_bar.models import Repository


def _make_raw_build(number: int, created: datetime, **overrides: Any) -> dict:
    """테스트용 raw 빌드 생성."""
    raw = {
        "author_login": "alice",
        "event": "push",
        "target": "master",
        "source": "master",
        "status": "success",
        "number": number,
        "message": f"Commit {number}",
        "link": f"https://github.com/octo/app/commit/{number}",
        "created": int(created.timestamp()),
    }
    raw.update(overrides)
    return raw


def _page(start: int, size: int, created: datetime) -> list[dict]:
    return [_make_raw_build(start - i, created) for i in range(size)]


@pytest.fixture()
def repo() -> Repository:
    return Repository(slug="octo/app")


class TestCollectBuilds:
    """collect_builds 테스트."""

    def test_stops_on_short_page(self, repo: Repository, now: datetime) -> None:
        recent = now - timedelta(minutes=5)
        mock_client = MagicMock()
        mock_client.fetch_builds_page.side_effect = [
            _page(300, 100, recent),
            _page(200, 100, recent),
            _page(100, 37, recent),
        ]
        stats = CollectStats(slug=repo.slug)

        builds = collect_builds(
            repo, mock_client, since=now - timedelta(hours=5), stats=stats,
        )

        assert len(builds) == 237
        assert mock_client.fetch_builds_page.call_args_list == [
            call("octo/app", 1, per_page=100),
            call("octo/app", 2, per_page=100),
            call("octo/app", 3, per_page=100),
        ]
        assert stats.pages_fetched == 3
        assert stats.builds_fetched == 237
        assert all(build.repository == repo for build in builds)

    def test_stops_when_last_build_is_too_old(self, repo: Repository, now: datetime) -> None:
        old = now - timedelta(hours=5, seconds=1)
        mock_client = MagicMock()
        mock_client.fetch_builds_page.side_effect = [_page(500, 100, old)]

        builds = collect_builds(repo, mock_client, since=now - timedelta(hours=5))

        assert len(builds) == 100
        mock_client.fetch_builds_page.assert_called_once_with("octo/app", 1, per_page=100)

    def test_full_page_within_window_continues(self, repo: Repository, now: datetime) -> None:
        mock_client = MagicMock()
        mock_client.fetch_builds_page.side_effect = [
            _page(200, 100, now - timedelta(hours=1)),
            [],
        ]

        builds = collect_builds(repo, mock_client, since=now - timedelta(hours=5))

        assert len(builds) == 100
        assert mock_client.fetch_builds_page.call_count == 2

    def test_empty_repository(self, repo: Repository, now: datetime) -> None:
        mock_client = MagicMock()
        mock_client.fetch_builds_page.return_value = []

        assert collect_builds(repo, mock_client, since=now) == []

    def test_error_propagates(self, repo: Repository, now: datetime) -> None:
        mock_client = MagicMock()
        mock_client.fetch_builds_page.side_effect = DroneAuthError()

        with pytest.raises(DroneAuthError):
            collect_builds(repo, mock_client, since=now)


class TestCollectAll:
    """collect_all 테스트."""

    def test_filters_repositories_authors_and_branches(
        self, app_config: AppConfig, now: datetime,
    ) -> None:
        created = now - timedelta(minutes=10)
        mock_client = MagicMock()
        mock_client.list_repositories.return_value = [
            Repository(slug="octo/other"),
            Repository(slug="octo/app"),
        ]
        mock_client.fetch_builds_page.return_value = [
            _make_raw_build(4, created, author_login="ALICE"),
            _make_raw_build(3, created, author_login="bob"),
            _make_raw_build(2, created, target="develop"),
            _make_raw_build(1, created, event="pull_request", target="develop",
                            source="feature/x", title="Add x"),
        ]

        result = collect_all(app_config, mock_client, now=now)

        assert list(result) == ["octo/app"]
        assert [build.number for build in result["octo/app"]] == [4, 1]
        mock_client.fetch_builds_page.assert_called_once_with("octo/app", 1, per_page=100)

    def test_empty_filters_include_everything(
        self, app_config: AppConfig, now: datetime,
    ) -> None:
        app_config.display.repositories = []
        app_config.display.authors = []
        created = now - timedelta(minutes=10)
        mock_client = MagicMock()
        mock_client.list_repositories.return_value = [
            Repository(slug="octo/lib"),
            Repository(slug="octo/app"),
        ]
        mock_client.fetch_builds_page.side_effect = [
            [_make_raw_build(1, created, author_login="bob")],
            [_make_raw_build(2, created, author_login="carol")],
        ]

        result = collect_all(app_config, mock_client, now=now)

        assert list(result) == ["octo/lib", "octo/app"]
        assert result["octo/lib"][0].author_login == "bob"
        assert result["octo/app"][0].author_login == "carol"
