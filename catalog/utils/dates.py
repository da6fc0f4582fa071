"""Datetime helpers."""

from __future__ import annotations

import os
from datetime import datetime

import pendulum

DEFAULT_TZ = "Pacific/Guam"


def timezone_name() -> str:
    return os.environ.get("TIMEZONE", DEFAULT_TZ)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return pendulum.now("UTC").naive()


def seconds_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds()
