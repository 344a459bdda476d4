"""drone-bar CLI.

BitBar/xbar 플러그인에서 인자 없이 실행된다.

drone-bar
drone-bar --config ~/.config/drone-bar/config.yaml --verbose --json-log
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from drone_bar import __version__
from drone_bar.config import DisplayConfig, load_config
from drone_bar.errors import ConfigError
from drone_bar.logging_config import setup_logging
from drone_bar.output import BitbarOutput
from drone_bar.report import run

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(path_type=Path),
              envvar="DRONE_BAR_CONFIG", default=None,
              help="설정 파일 경로 (기본: ~/.config/drone-bar/config.yaml)")
@click.option("--json-log", is_flag=True, help="JSON 형태 로그 출력 (stderr)")
@click.option("--verbose", "-v", is_flag=True, help="DEBUG 로그 출력")
def main(config_path: Path | None, json_log: bool, verbose: bool) -> None:
    """Drone 빌드 상태를 BitBar 메뉴로 출력한다."""
    setup_logging(json_format=json_log, level=logging.DEBUG if verbose else logging.WARNING)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Config load failed: %s", e, extra={"event_code": "CONFIG_INVALID"})
        BitbarOutput(DisplayConfig().title).error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error while loading config",
                         extra={"event_code": "CONFIG_INVALID"})
        BitbarOutput(DisplayConfig().title).error(str(e) or type(e).__name__)
        sys.exit(1)

    sys.exit(run(config))


if __name__ == "__main__":
    main()
