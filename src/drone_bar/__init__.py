"""Drone CI 빌드 상태를 BitBar/xbar 메뉴로 출력한다."""

__version__ = "0.1.0"
