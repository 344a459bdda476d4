"""Drone 빌드 Pagination 수집기.

저장소별로 페이지를 순회하며 빌드를 누적하고,
표시 구간 밖에 도달하면 더 이상 페이지를 요청하지 않는다.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta

from drone_bar.client import PAGE_SIZE, DroneClient
from drone_bar.config import AppConfig
from drone_bar.models import Build, Repository
from drone_bar.output import is_displayable

logger = logging.getLogger(__name__)

# slug -> 수집 순서대로의 빌드 목록
BuildsByRepository = dict[str, list[Build]]


@dataclass
class CollectStats:
    """저장소별 수집 통계."""

    slug: str
    pages_fetched: int = 0
    builds_fetched: int = 0
    builds_kept: int = 0          # 작성자/표시 필터 후
    duration_ms: float = 0.0


def collect_builds(
    repo: Repository,
    client: DroneClient,
    *,
    since: datetime,
    stats: CollectStats | None = None,
) -> list[Build]:
    """단일 저장소의 빌드를 페이지 단위로 수집한다.

    종료 조건 (페이지 수신 직후, 순서대로):
    1. 페이지 크기가 PAGE_SIZE 미만 -> 마지막 페이지
    2. 페이지 마지막 빌드의 created_at이 since 이전 -> 이후 페이지는 모두 표시 구간 밖

    종료를 유발한 페이지의 빌드도 결과에 포함한다.
    """
    page = 1
    builds: list[Build] = []
    while True:
        raw_builds = client.fetch_builds_page(repo.slug, page, per_page=PAGE_SIZE)
        new_builds = [Build.from_api_response(repo, raw) for raw in raw_builds]
        builds.extend(new_builds)

        if stats is not None:
            stats.pages_fetched += 1
            stats.builds_fetched += len(new_builds)

        if len(new_builds) < PAGE_SIZE:
            return builds
        if new_builds[-1].created_at < since:
            logger.debug(
                "Stopping at page %d of %s: last build older than %s",
                page, repo.slug, since.isoformat(),
            )
            return builds

        page += 1


def collect_all(
    config: AppConfig,
    client: DroneClient,
    *,
    now: datetime,
) -> BuildsByRepository:
    """설정된 저장소의 빌드를 순차 수집한다.

    - 저장소 목록 응답 순서를 유지하며 repositories 설정에 포함된 것만 조회
    - authors 설정이 있으면 해당 작성자의 빌드만 남김
    - 메뉴에 표시할 수 없는 빌드(base branch가 아닌 push 등)는 제외
    """
    display = config.display
    since = now - timedelta(seconds=display.display_interval_sec)
    wanted = set(display.repositories)
    authors = set(display.authors)

    repos = [
        repo for repo in client.list_repositories()
        if not wanted or repo.slug in wanted
    ]
    logger.info(
        "Collecting builds for %d repositories", len(repos),
        extra={"event_code": "COLLECT_START", "count": len(repos)},
    )

    builds_by_repo: BuildsByRepository = {}
    for repo in repos:
        stats = CollectStats(slug=repo.slug)
        start_time = time.monotonic()

        repo_builds = [
            build
            for build in collect_builds(repo, client, since=since, stats=stats)
            if (not authors or build.author_login in authors)
            and is_displayable(build, display.base_branch)
        ]
        builds_by_repo[repo.slug] = repo_builds

        stats.builds_kept = len(repo_builds)
        stats.duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "Repository done: %s (pages=%d, fetched=%d, kept=%d, %.1fs)",
            stats.slug, stats.pages_fetched, stats.builds_fetched,
            stats.builds_kept, stats.duration_ms / 1000,
            extra={"event_code": "COLLECT_REPO", "repo": stats.slug,
                   "count": stats.builds_kept, "duration_ms": stats.duration_ms},
        )

    return builds_by_repo
