from __future__ import annotations

import os
from collections.abc import Generator

import pytest

from domain.example_plan import load_example_plan
from domain.models import Plan
from tests.helpers.recording_renderer import RecordingRenderer


def _clear_planviz_env() -> None:
    for key in list(os.environ):
        if key.startswith("PLANVIZ_"):
            os.environ.pop(key, None)


_clear_planviz_env()


@pytest.fixture(autouse=True)
def clear_planviz_env() -> Generator[None, None, None]:
    _clear_planviz_env()
    yield
    _clear_planviz_env()


@pytest.fixture
def recording_renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def example_plan() -> Plan:
    return load_example_plan()
