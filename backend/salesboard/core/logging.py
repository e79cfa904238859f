"""Loguru setup shared by the API process and its tests.

Every record carries the ``request_id`` and ``user_id`` of the request being
served; outside a request both read ``-``.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from sys import stdout
from typing import Any

from loguru import logger

from salesboard.core.config import settings

request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
user_id_ctx_var: ContextVar[str] = ContextVar("user_id", default="-")

HUMAN_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "{extra[request_id]} {extra[user_id]} | <cyan>{message}</cyan> {extra}"
)

# third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("passlib.handlers.bcrypt", "aiomysql", "sqlalchemy.engine.Engine")


def _patch_record(record: dict[str, Any]) -> None:
    record["extra"].setdefault("request_id", request_id_ctx_var.get())
    record["extra"].setdefault("user_id", user_id_ctx_var.get())


def setup_logging(level: str | None = None, *, json: bool | None = None) -> None:
    """Install the single stdout sink; JSON lines unless ``LOG_JSON`` is off."""

    level = (level or settings.LOG_LEVEL).upper()
    json = settings.LOG_JSON if json is None else json

    logging.basicConfig(level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.remove()
    logger.configure(patcher=_patch_record)
    if json:
        logger.add(stdout, level=level, enqueue=True, backtrace=False, diagnose=False, serialize=True)
    else:
        logger.add(stdout, level=level, format=HUMAN_FORMAT, colorize=True, diagnose=False)
