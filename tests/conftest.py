import logging
from datetime import datetime, timedelta, timezone

import pytest

from mlog.config import LogMode, RotationConfig


class Clock:
    """Manually advanced clock, usable as a writer's time_func."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def log_path(tmp_path):
    return str(tmp_path / "app.log")


@pytest.fixture
def make_config(log_path):
    def _make(**overrides):
        defaults = dict(path=log_path, mode=LogMode.REDIRECT, max_files=5, max_age=0, max_size=0)
        defaults.update(overrides)
        return RotationConfig(**defaults)
    return _make


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
