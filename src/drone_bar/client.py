"""Drone REST API 동기 클라이언트.

토큰 인증으로 저장소 목록과 빌드 페이지를 조회한다.
- httpx 기반 HTTP 클라이언트
- 재시도 없음: 첫 실패가 곧 전체 실행 실패
- HTTP 상태 코드 -> 예외 종류 매핑
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
import orjson

from drone_bar import __version__
from drone_bar.config import DroneConfig
from drone_bar.errors import (
    ConfigError,
    DroneAuthError,
    DroneConnectionError,
    DroneDecodeError,
    DroneRequestError,
)
from drone_bar.models import Repository

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
REPOSITORIES_PATH = "/api/user/repos"
BUILDS_PATH = "/api/repos/{slug}/builds"
PAGE_SIZE = 100


class DroneClient:
    """Drone REST API 클라이언트."""

    def __init__(self, config: DroneConfig, token: str | None = None) -> None:
        self._base_url = _parse_base_url(config.base_url)
        self._token = token or config.token or os.environ.get("DRONE_TOKEN", "")
        if not self._token:
            raise ConfigError("DRONE_TOKEN is not set")

        self._client = httpx.Client(
            base_url=self._base_url,
            headers={
                AUTHORIZATION_HEADER: f"Bearer {self._token}",
                "Accept": "application/json",
                "User-Agent": f"drone-bar/{__version__}",
            },
            timeout=config.request_timeout_sec,
        )

    @property
    def base_url(self) -> str:
        return str(self._base_url)

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET 요청 후 JSON 본문을 반환한다.

        Raises:
            DroneConnectionError: 전송 계층 실패
            DroneAuthError: 401
            DroneRequestError: 그 외 200이 아닌 응답
            DroneDecodeError: 본문이 JSON이 아님
        """
        try:
            resp = self._client.get(path, params=params)
        except httpx.TransportError as e:
            logger.debug("Transport error on %s: %s", path, e)
            raise DroneConnectionError() from e

        logger.debug(
            "GET %s -> %d", resp.url, resp.status_code,
            extra={"event_code": "HTTP_GET", "status_code": resp.status_code},
        )

        if resp.status_code == 401:
            raise DroneAuthError()
        if resp.status_code != 200:
            raise DroneRequestError(resp.status_code)

        try:
            return orjson.loads(resp.content)
        except orjson.JSONDecodeError as e:
            raise DroneDecodeError(f"Invalid JSON from {path}") from e

    def list_repositories(self) -> list[Repository]:
        """토큰 사용자가 접근 가능한 저장소 목록. pagination 없음."""
        repos = self.get(REPOSITORIES_PATH)
        if not isinstance(repos, list):
            raise DroneDecodeError(f"Expected a list from {REPOSITORIES_PATH}")
        return [Repository.from_api_response(repo) for repo in repos]

    def fetch_builds_page(self, slug: str, page: int, *, per_page: int = PAGE_SIZE) -> list[dict]:
        """저장소 빌드 한 페이지를 raw dict 배열로 반환한다 (최신 -> 오래된 순)."""
        builds = self.get(
            BUILDS_PATH.format(slug=slug),
            {"per_page": per_page, "page": page},
        )
        if not isinstance(builds, list):
            raise DroneDecodeError(f"Expected a list of builds for {slug}")
        return builds

    def close(self) -> None:
        """httpx.Client를 종료한다."""
        self._client.close()

    def __enter__(self) -> DroneClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def _parse_base_url(base_url: str) -> httpx.URL:
    """절대 http(s) URL만 허용한다.

    base URL의 path는 유지되고 API 경로는 그 뒤에 붙는다 (sub-path 배포 지원).
    """
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigError(f"Invalid BASE_URL: {base_url}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(f"Invalid BASE_URL: {base_url}")
    return url
