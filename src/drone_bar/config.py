"""YAML 설정 로딩 + Pydantic 모델."""

from __future__ import annotations

import os
from pathlib import Path

import click
import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from drone_bar.errors import ConfigError

APP_NAME = "drone-bar"


def default_config_path() -> Path:
    """사용자 설정 디렉터리의 config.yaml.

    Linux: ~/.config/drone-bar/config.yaml
    macOS: ~/Library/Application Support/drone-bar/config.yaml
    """
    return Path(click.get_app_dir(APP_NAME)) / "config.yaml"


# ── 설정 모델 ──────────────────────────────────────────


class DroneConfig(BaseModel):
    base_url: str
    token: str = ""
    request_timeout_sec: float = Field(default=10.0, gt=0)


class DisplayConfig(BaseModel):
    title: str = "Drone IO"
    authors: list[str] = Field(default_factory=list)       # 비어 있으면 전체
    repositories: list[str] = Field(default_factory=list)  # 비어 있으면 전체
    base_branch: str = "master"
    recent_interval_sec: int = Field(default=3_600, gt=0)
    display_interval_sec: int = Field(default=5 * 3_600, gt=0)
    clipboard_command: str = "/usr/bin/pbcopy"

    @field_validator("authors")
    @classmethod
    def normalize_authors(cls, v: list[str]) -> list[str]:
        # 작성자 비교는 소문자로만 한다
        return [author.lower() for author in v]


class AppConfig(BaseModel):
    """애플리케이션 전체 설정."""

    drone: DroneConfig
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    def check_windows(self) -> None:
        """표시 구간이 최근 구간보다 길어야 한다. 네트워크 호출 전에 검사한다."""
        if self.display.display_interval_sec <= self.display.recent_interval_sec:
            raise ConfigError(
                "DISPLAY_BUILD_INTERVAL must be greater than "
                "DISPLAY_BUILD_AS_RECENT_INTERVAL"
            )


# ── 로딩 ───────────────────────────────────────────────


def load_config(path: Path | None = None) -> AppConfig:
    """YAML 설정 파일을 로딩하고 Pydantic 모델로 검증한다.

    환경변수 우선순위: 시스템 환경변수 > .env 파일 > config.yaml 값
    """
    config_path = path or default_config_path()

    # .env 파일 로딩: config.yaml과 같은 디렉터리의 .env를 탐색
    dotenv_path = config_path.parent / ".env"
    load_dotenv(dotenv_path=dotenv_path, override=False)

    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {config_path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e.strerror}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Config file is not UTF-8: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}") from e

    if raw is None:
        raise ConfigError(f"Empty config file: {config_path}")
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {config_path}")
    if not isinstance(raw.get("drone", {}), dict):
        raise ConfigError(f"Config section 'drone' must be a mapping: {config_path}")

    # 환경변수 오버라이드
    if server := os.environ.get("DRONE_SERVER"):
        raw.setdefault("drone", {})
        raw["drone"]["base_url"] = server
    if token := os.environ.get("DRONE_TOKEN"):
        raw.setdefault("drone", {})
        raw["drone"]["token"] = token

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ConfigError(f"Invalid config ({location}): {first['msg']}") from e
