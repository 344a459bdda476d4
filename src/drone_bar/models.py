"""Drone 저장소/빌드 데이터 모델 (Pydantic)."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from drone_bar.errors import DroneDecodeError


class BuildStatus(StrEnum):
    """Drone 빌드 상태. 알 수 없는 값은 OTHER로 수렴한다."""

    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"
    RUNNING = "running"
    KILLED = "killed"
    ERROR = "error"
    SKIPPED = "skipped"
    BLOCKED = "blocked"
    DECLINED = "declined"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> BuildStatus:
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


class BuildEvent(StrEnum):
    """빌드 트리거 이벤트."""

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    TAG = "tag"
    PROMOTE = "promote"
    CRON = "cron"
    CUSTOM = "custom"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> BuildEvent:
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: str  # owner/name

    @classmethod
    def from_api_response(cls, raw: dict[str, Any]) -> Repository:
        try:
            return cls(slug=raw["slug"])
        except (KeyError, TypeError) as e:
            raise DroneDecodeError(f"Invalid repository record: {e!r}") from e
        except ValidationError as e:
            raise DroneDecodeError(f"Invalid repository record: {_first_error(e)}") from e


class Build(BaseModel):
    """Drone 빌드.

    - author_login은 수집 시점에 소문자로 정규화한다
    - created_at은 정렬/구간 판정의 유일한 키이며, 서버 값이 없으면 epoch
    """

    model_config = ConfigDict(frozen=True)

    repository: Repository
    author_login: str = ""
    event: BuildEvent
    event_name: str  # 서버가 보낸 원래 값 (표시용)
    source: str
    target: str
    status: BuildStatus
    number: int
    title: str = ""
    message: str
    link: str
    started_at: datetime
    created_at: datetime

    @classmethod
    def from_api_response(cls, repository: Repository, raw: dict[str, Any]) -> Build:
        """Drone API 빌드 dict -> Build 변환.

        author_login/title/started/created 외 필드가 없으면 DroneDecodeError.
        """
        try:
            return cls(
                repository=repository,
                author_login=(raw.get("author_login") or "").lower(),
                event=BuildEvent.parse(raw["event"]),
                event_name=str(raw["event"]),
                source=raw["source"],
                target=raw["target"],
                status=BuildStatus.parse(raw["status"]),
                number=raw["number"],
                title=raw.get("title") or "",
                message=raw["message"],
                link=raw["link"],
                started_at=_from_unix(raw.get("started") or 0),
                created_at=_from_unix(raw.get("created") or 0),
            )
        except KeyError as e:
            raise DroneDecodeError(
                f"Build record in {repository.slug} is missing field {e}"
            ) from e
        except ValidationError as e:
            raise DroneDecodeError(
                f"Invalid build record in {repository.slug}: {_first_error(e)}"
            ) from e
        except (AttributeError, TypeError, ValueError, OverflowError, OSError) as e:
            raise DroneDecodeError(f"Invalid build record in {repository.slug}") from e

    @property
    def is_pull_request(self) -> bool:
        return self.event is BuildEvent.PULL_REQUEST

    @property
    def is_pending(self) -> bool:
        return self.status in (BuildStatus.PENDING, BuildStatus.RUNNING)

    @property
    def is_failure(self) -> bool:
        return self.status is BuildStatus.FAILURE


def _from_unix(seconds: int | float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


def _first_error(e: ValidationError) -> str:
    """ValidationError의 첫 항목만 한 줄로 요약한다."""
    first = e.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}"
