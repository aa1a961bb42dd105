"""structlogの設定。"""

import logging
import sys

import structlog


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # 出力先は呼び出し時点のsys.stderrを使う
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "WARNING", json: bool = False) -> None:
    """ログをstderrへ出力するようstructlogを設定する。

    レポート本文はstdoutに出すため、ログと混ざらないようにする。
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)
        ),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
