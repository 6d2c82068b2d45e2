import io

import pytest

from canvas import Canvas
from session import PainterConfig, Session


@pytest.fixture
def canvas():
    """Small 10x10 canvas, empty."""
    return Canvas(10, 10)


@pytest.fixture
def session(tmp_path):
    """10x10 session whose messages go to in-memory streams."""
    config = PainterConfig(width=10, height=10, history_file=str(tmp_path / "history.txt"))
    return Session(config, out=io.StringIO(), err=io.StringIO())
