"""빌드 시간 구간 분류 + 정렬 + 타이틀 색상 결정."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta

from drone_bar.models import Build
from drone_bar.output import Color


def recent_builds(
    builds: Iterable[Build],
    *,
    now: datetime,
    recent_interval_sec: int,
) -> list[Build]:
    """created_at >= now - recent_interval_sec 인 빌드.

    수집 순서(API 응답 순서, 최신 -> 오래된 순)를 그대로 유지한다.
    """
    threshold = now - timedelta(seconds=recent_interval_sec)
    return [build for build in builds if build.created_at >= threshold]


def older_builds(
    builds: Iterable[Build],
    *,
    now: datetime,
    recent_interval_sec: int,
    display_interval_sec: int,
) -> list[Build]:
    """[now - display_interval, now - recent_interval) 구간의 빌드, 최신순."""
    oldest = now - timedelta(seconds=display_interval_sec)
    newest = now - timedelta(seconds=recent_interval_sec)
    selected = [build for build in builds if oldest <= build.created_at < newest]
    return sorted(selected, key=lambda build: build.created_at, reverse=True)


def title_color(
    builds_by_repo: Mapping[str, Sequence[Build]],
    *,
    now: datetime,
    recent_interval_sec: int,
) -> Color:
    """메뉴바 타이틀 색상.

    - 어떤 저장소든 가장 최근 빌드가 failure -> RED
    - 아니면 최근 빌드 중 pending/running이 하나라도 있으면 -> ORANGE
    - 그 외 -> GREEN
    """
    failure = False
    pending = False
    for builds in builds_by_repo.values():
        recent = recent_builds(builds, now=now, recent_interval_sec=recent_interval_sec)
        if recent and recent[0].is_failure:
            failure = True
        if any(build.is_pending for build in recent):
            pending = True

    if failure:
        return Color.RED
    if pending:
        return Color.ORANGE
    return Color.GREEN


def group_by_author(builds: Iterable[Build]) -> dict[str, list[Build]]:
    """author_login(소문자) -> 빌드 목록. 첫 등장 순서를 유지한다."""
    grouped: dict[str, list[Build]] = {}
    for build in builds:
        grouped.setdefault(build.author_login, []).append(build)
    return grouped
