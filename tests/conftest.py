from __future__ import annotations

import os
from collections.abc import Generator

import pytest

from domain.models import GenerationConfig
from domain.services.convert_plan_to_excalidraw import PlanToExcalidrawConverter


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
def converter() -> PlanToExcalidrawConverter:
    return PlanToExcalidrawConverter(GenerationConfig())
