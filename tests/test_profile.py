import logging
import re
import time

import pytest

from pbtracer.logger import get_logger
from pbtracer.profile import Profile


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


@pytest.fixture
def messages():
    logger = get_logger()
    handler = _ListHandler()
    old_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    yield handler.messages
    logger.removeHandler(handler)
    logger.setLevel(old_level)


def test_logs_name_and_duration(messages):
    with Profile("build"):
        pass
    assert len(messages) == 1
    assert re.fullmatch(r"Profile build cost \d+ ms", messages[0])


def test_elapsed_time_covers_the_block(messages):
    with Profile("sleep") as profile:
        time.sleep(0.03)
    assert profile.elapsed_ms >= 25
    assert messages[-1] == f"Profile sleep cost {profile.elapsed_ms} ms"


def test_exceptions_propagate_and_are_timed(messages):
    with pytest.raises(RuntimeError):
        with Profile("failing"):
            raise RuntimeError("boom")
    assert messages[-1].startswith("Profile failing cost ")


def test_no_report_before_exit(messages):
    profile = Profile("pending")
    assert profile.elapsed_ms is None
    assert messages == []