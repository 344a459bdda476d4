"""BitBar/xbar 출력 포매터.

한 줄 = 메뉴 항목 하나. 호출 순서가 곧 출력 순서다.

    <title> | color='green'
    ---
    <menu> | color='red' href='https://...' length=50
    --<submenu> | bash='/bin/bash' terminal=false param1='-c' ...
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from enum import StrEnum

import click

from drone_bar.models import Build

logger = logging.getLogger(__name__)

MENU_LENGTH = 50       # BitBar 표시 폭 제한
TITLE_MAX_CHARS = 50   # 빌드 제목 자르기 기준
ELLIPSIS = "..."
SEPARATOR = "---"
SUBMENU_PREFIX = "--"

# 클립보드 복사 명령에 넣어도 안전한 브랜치 이름. 첫 글자가 "-"면 printf 옵션이 된다
_SAFE_BRANCH = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._/-]*$")


class Color(StrEnum):
    NONE = "none"
    GREEN = "green"
    RED = "red"
    ORANGE = "orange"
    WHITE = "white"


class BitbarOutput:
    """타이틀 한 줄 + 본문 버퍼를 누적했다가 한 번에 출력한다."""

    def __init__(self, title: str, *, color: Color = Color.NONE) -> None:
        self._title = _line(title, color=color)
        self._lines: list[str] = []

    def title(self, title: str, *, color: Color = Color.NONE) -> None:
        self._title = _line(title, color=color)

    def menu(
        self,
        text: str,
        *,
        color: Color = Color.NONE,
        href: str | None = None,
        bash: str | None = None,
        terminal: bool | None = None,
        params: Sequence[str] = (),
        alternate: bool = False,
        length: int | None = MENU_LENGTH,
    ) -> None:
        self._lines.append(_line(
            text, color=color, href=href, bash=bash, terminal=terminal,
            params=params, alternate=alternate, length=length,
        ))

    def submenu(
        self,
        text: str,
        *,
        color: Color = Color.NONE,
        href: str | None = None,
        bash: str | None = None,
        terminal: bool | None = None,
        params: Sequence[str] = (),
        alternate: bool = False,
        length: int | None = MENU_LENGTH,
    ) -> None:
        self._lines.append(SUBMENU_PREFIX + _line(
            text, color=color, href=href, bash=bash, terminal=terminal,
            params=params, alternate=alternate, length=length,
        ))

    def error(self, message: str) -> None:
        """본문을 비우고 에러 메시지를 빨간 타이틀로 즉시 출력한다."""
        self._lines = []
        self.title(message, color=Color.RED)
        self.print()

    def render(self) -> str:
        return "\n".join([self._title, SEPARATOR, *self._lines]) + "\n"

    def print(self) -> None:
        click.echo(self.render(), nl=False)


def _line(
    text: str,
    *,
    color: Color = Color.NONE,
    href: str | None = None,
    bash: str | None = None,
    terminal: bool | None = None,
    params: Sequence[str] = (),
    alternate: bool = False,
    length: int | None = None,
) -> str:
    # 한 항목은 반드시 한 줄
    text = text.partition("\n")[0].rstrip("\r")
    attrs: list[str] = []
    if color != Color.NONE:
        attrs.append(f"color='{color}'")
    if href:
        attrs.append(f"href='{href}'")
    if bash:
        attrs.append(f"bash='{bash}'")
        if terminal is not None:
            attrs.append(f"terminal={'true' if terminal else 'false'}")
        for index, value in enumerate(params, start=1):
            attrs.append(f"param{index}='{value}'")
    if length:
        attrs.append(f"length={length}")
    if alternate:
        attrs.append("alternate=true")
    return " ".join([text, "|", *attrs])


# ── 빌드 표시 ──────────────────────────────────────────


def display_title(build: Build, base_branch: str) -> str | None:
    """메뉴에 표시할 빌드 제목. 표시 대상이 아니면 None.

    - pull_request: PR 제목
    - base branch 대상 빌드: 커밋 메시지
    - 그 외: 표시하지 않음
    """
    if build.is_pull_request:
        title = build.title
    elif build.target == base_branch:
        title = build.message
    else:
        return None

    title = title.partition("\n")[0].rstrip("\r")
    if len(title) > TITLE_MAX_CHARS:
        title = title[:TITLE_MAX_CHARS] + ELLIPSIS
    return title


def is_displayable(build: Build, base_branch: str) -> bool:
    return display_title(build, base_branch) is not None


def build_color(build: Build) -> Color:
    if build.is_pending:
        return Color.ORANGE
    if build.is_failure:
        return Color.RED
    return Color.GREEN


def build_url(base_url: str, build: Build) -> str:
    """Drone 웹 UI의 빌드 페이지 주소."""
    return f"{base_url.rstrip('/')}/{build.repository.slug}/{build.number}"


def print_build(
    output: BitbarOutput,
    build: Build,
    *,
    base_url: str,
    base_branch: str,
    clipboard_command: str,
) -> None:
    title = display_title(build, base_branch)
    if title is None:
        return

    output.menu(title, color=build_color(build), href=build_url(base_url, build))
    output.submenu(build.source)

    if build.is_pull_request:
        output.submenu("Go to PR", href=build.link.removesuffix(".diff"))
        if _SAFE_BRANCH.match(build.source):
            output.submenu(
                "Copy branch",
                bash="/bin/bash",
                params=["-c", f"/usr/bin/printf {build.source} | {clipboard_command}"],
                terminal=False,
            )
        else:
            logger.warning(
                "Skipping copy action for unsafe branch name %r", build.source,
                extra={"event_code": "UNSAFE_BRANCH", "repo": build.repository.slug},
            )

    output.menu(
        f"{build.event_name} from {build.author_login} on {build.repository.slug}",
        color=Color.WHITE,
        alternate=True,
        length=None,
    )


def print_builds(
    output: BitbarOutput,
    builds: Iterable[Build],
    *,
    base_url: str,
    base_branch: str,
    clipboard_command: str,
) -> None:
    for build in builds:
        print_build(
            output, build,
            base_url=base_url,
            base_branch=base_branch,
            clipboard_command=clipboard_command,
        )
