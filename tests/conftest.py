"""공통 fixture."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
import yaml

from drone_bar.config import AppConfig, DisplayConfig, DroneConfig

NOW = datetime(2026, 10, 17, 12, 0, 0, tzinfo=UTC)
NOW_TS = int(NOW.timestamp())
BASE_URL = "https://drone.example.com"


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def sample_pr_build() -> dict[str, Any]:
    """pull_request 빌드 응답 샘플."""
    return {
        "id": 4821,
        "author_login": "Alice",
        "author_name": "Alice Doe",
        "event": "pull_request",
        "target": "master",
        "source": "feature/login",
        "status": "running",
        "number": 42,
        "title": "Add login page",
        "message": "Add login page\n\nImplements the form.",
        "link": "https://github.com/octo/app/pull/7.diff",
        "started": NOW_TS - 120,
        "created": NOW_TS - 180,
    }


@pytest.fixture()
def sample_config_data() -> dict[str, Any]:
    """테스트용 config dict."""
    return {
        "drone": {
            "base_url": BASE_URL,
            "token": "test-token",
        },
        "display": {
            "authors": ["Alice"],
            "repositories": ["octo/app"],
            "base_branch": "master",
            "recent_interval_sec": 3600,
            "display_interval_sec": 18000,
        },
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, sample_config_data: dict[str, Any]) -> Path:
    """임시 config.yaml 파일."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(sample_config_data), encoding="utf-8")
    return config_path


@pytest.fixture()
def app_config() -> AppConfig:
    return AppConfig(
        drone=DroneConfig(base_url=BASE_URL, token="test-token"),
        display=DisplayConfig(
            authors=["alice"],
            repositories=["octo/app"],
            recent_interval_sec=3600,
            display_interval_sec=18000,
        ),
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """개발자 환경의 DRONE_* 변수가 테스트에 섞이지 않게 한다."""
    for name in ("DRONE_SERVER", "DRONE_TOKEN", "DRONE_BAR_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> None:
    """CLI 테스트가 설정한 핸들러를 다음 테스트로 넘기지 않는다."""
    yield
    logger = logging.getLogger("drone_bar")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
