from __future__ import annotations

import pytest

from domain.services.text_measurement import measure_text


def test_empty_text_has_no_width() -> None:
    assert measure_text("", 14) == 0


def test_wide_characters_measure_wider_than_narrow_ones() -> None:
    assert measure_text("mmmm", 14) > measure_text("iiii", 14)


def test_capitals_and_scaling() -> None:
    assert measure_text("AB", 10) == pytest.approx(14)
    assert measure_text("abc", 28) == pytest.approx(2 * measure_text("abc", 14))
