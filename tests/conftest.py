from __future__ import annotations

import pytest

from fakes import SleepRecorder


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()
