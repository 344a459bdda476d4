"""drone-bar 예외 계층.

모든 예외는 DroneBarError를 상속하며, 최상위에서 에러 타이틀로 출력된다.
"""

from __future__ import annotations


class DroneBarError(Exception):
    """drone-bar 실행 실패."""


class ConfigError(DroneBarError):
    """설정 오류 (잘못된 base URL, 표시 구간 역전 등)."""


class DroneApiError(DroneBarError):
    """Drone API 호출 실패."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class DroneConnectionError(DroneApiError):
    """DNS, TLS, 연결 거부, 타임아웃 등 전송 계층 실패."""

    def __init__(self) -> None:
        super().__init__(0, "Failed to connect to Drone")


class DroneAuthError(DroneApiError):
    """401 응답."""

    def __init__(self) -> None:
        super().__init__(401, "Verify your Drone token")


class DroneRequestError(DroneApiError):
    """200이 아닌 기타 응답."""

    def __init__(self, status_code: int):
        super().__init__(status_code, f"Request failed with status {status_code}")


class DroneDecodeError(DroneApiError):
    """응답 본문 JSON 파싱 실패 또는 필수 필드 누락."""

    def __init__(self, message: str):
        super().__init__(200, message)
