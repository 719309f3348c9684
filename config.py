"""
config.py
Settings read from the environment (and an optional .env file).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Config:
    DATABASE_PATH = os.environ.get("STUDYHALL_DB") or str(Path(__file__).with_name("studyhall.db"))
    LOG_LEVEL = os.environ.get("STUDYHALL_LOG_LEVEL") or "INFO"
    RECENT_STUDENTS_LIMIT = int(os.environ.get("STUDYHALL_RECENT_LIMIT") or 5)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or Config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
