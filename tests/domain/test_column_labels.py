from __future__ import annotations

import pytest

from domain.models import GenerationConfig
from domain.services.column_labels import ColumnLabelRenderer
from domain.services.element_factory import ElementFactory
from domain.services.id_generator import IdGenerator
from domain.styles import ORDERED_COLUMN_COLOR, TEXT_LEFT_OFFSET, TEXT_RIGHT_OFFSET


def _renderer() -> ColumnLabelRenderer:
    return ColumnLabelRenderer(ElementFactory(IdGenerator(), GenerationConfig()))


def test_runs_merge_consecutive_columns_of_same_color() -> None:
    runs = _renderer().runs(["a", "b", "c", "d"], ["b", "c"])

    assert [run.text for run in runs] == ["a", ", b, c", ", d"]
    assert runs[1].color == ORDERED_COLUMN_COLOR
    assert runs[0].color == runs[2].color == GenerationConfig().node_color


def test_no_columns_renders_nothing() -> None:
    assert _renderer().render_right([], [], 100, 50) == []


def test_render_right_starts_after_anchor() -> None:
    elements = _renderer().render_right(["a", "b"], ["a"], 100, 50)

    assert elements[0]["x"] == pytest.approx(50 + TEXT_RIGHT_OFFSET)
    assert elements[1]["x"] == pytest.approx(elements[0]["x"] + elements[0]["width"])
    assert all(element["textAlign"] == "left" for element in elements)
    assert len({tuple(element["groupIds"]) for element in elements}) == 1


def test_render_left_ends_before_anchor() -> None:
    elements = _renderer().render_left(["a", "b", "c"], ["c"], 100, 400)
    last = elements[-1]

    assert last["x"] + last["width"] == pytest.approx(400 + TEXT_LEFT_OFFSET)
    assert all(element["textAlign"] == "right" for element in elements)
    assert elements[0]["y"] == pytest.approx(100 - elements[0]["height"] / 2)
