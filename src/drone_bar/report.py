"""수집 -> 분류 -> 출력 오케스트레이션."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from drone_bar.classify import group_by_author, older_builds, recent_builds, title_color
from drone_bar.client import DroneClient
from drone_bar.collector import collect_all
from drone_bar.config import AppConfig
from drone_bar.errors import DroneBarError
from drone_bar.output import BitbarOutput, print_builds

logger = logging.getLogger(__name__)


def build_menu(
    config: AppConfig,
    client: DroneClient,
    output: BitbarOutput,
    *,
    now: datetime,
) -> None:
    """메뉴 전체를 output에 채운다.

    1. 저장소별 최근 빌드를 작성자 단위 섹션으로 출력
    2. 최근 빌드 상태로 타이틀 색상 결정
    3. 전체 저장소의 이전 빌드를 "Older builds" 섹션으로 출력
    """
    display = config.display
    builds_by_repo = collect_all(config, client, now=now)
    render_options = {
        "base_url": client.base_url,
        "base_branch": display.base_branch,
        "clipboard_command": display.clipboard_command,
    }

    for slug, builds in builds_by_repo.items():
        recent = recent_builds(builds, now=now, recent_interval_sec=display.recent_interval_sec)
        if not recent:
            continue

        by_author = group_by_author(recent)
        # authors 설정이 없으면 등장 순서대로
        for author in display.authors or list(by_author):
            author_builds = by_author.get(author)
            if not author_builds:
                continue
            output.menu(f"Recent builds from {author} on {slug}")
            print_builds(output, author_builds, **render_options)

    output.title(
        display.title,
        color=title_color(
            builds_by_repo, now=now, recent_interval_sec=display.recent_interval_sec,
        ),
    )

    all_builds = [build for builds in builds_by_repo.values() for build in builds]
    output.menu("Older builds")
    print_builds(
        output,
        older_builds(
            all_builds,
            now=now,
            recent_interval_sec=display.recent_interval_sec,
            display_interval_sec=display.display_interval_sec,
        ),
        **render_options,
    )


def run(config: AppConfig, *, now: datetime | None = None) -> int:
    """한 번 실행하고 exit code를 반환한다.

    어떤 단계든 첫 실패에서 중단하고 에러 타이틀만 출력한다.
    """
    output = BitbarOutput(config.display.title)
    try:
        config.check_windows()
        with DroneClient(config.drone) as client:
            build_menu(config, client, output, now=now or datetime.now(tz=UTC))
    except DroneBarError as e:
        logger.error("Run failed: %s", e, extra={"event_code": "RUN_FAILED"})
        output.error(str(e))
        return 1
    except Exception as e:
        logger.exception("Unexpected error", extra={"event_code": "RUN_FAILED"})
        output.error(str(e) or type(e).__name__)
        return 1

    output.print()
    return 0
