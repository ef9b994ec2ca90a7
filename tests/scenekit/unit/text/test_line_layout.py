from __future__ import annotations

import pytest

from scenekit.api.geometry import LayoutPoint
from scenekit.text.line_layout import layout_lines
from tests.scenekit.conftest import FakeFont


def test_baselines_advance_one_pitch_per_line() -> None:
    font = FakeFont()

    lines = list(layout_lines(font, ("abc", "de", "f"), 13.0, LayoutPoint(10.0, 0.0)))

    assert [line.origin.y for line in lines] == [13.0, 26.0, 39.0]
    assert [line.index for line in lines] == [0, 1, 2]
    assert all(g.position.y == line.origin.y for line in lines for g in line.glyphs)
    assert [g.position.x for g in lines[0].glyphs] == [10.0, 16.0, 22.0]


def test_layout_is_deterministic() -> None:
    font = FakeFont()
    first = list(layout_lines(font, ("Mammon slept.",), 128.0, LayoutPoint(10.0, 0.0)))
    second = list(layout_lines(font, ("Mammon slept.",), 128.0, LayoutPoint(10.0, 0.0)))
    assert first == second


def test_precomputed_metrics_are_used() -> None:
    font = FakeFont()
    metrics = font.vertical_metrics(26.0)

    lines = list(layout_lines(font, ("a", "b"), 13.0, LayoutPoint(0.0, 5.0), v_metrics=metrics))

    assert [line.origin.y for line in lines] == [pytest.approx(31.0), pytest.approx(57.0)]


def test_no_lines_yields_nothing() -> None:
    assert list(layout_lines(FakeFont(), (), 13.0, LayoutPoint(0.0, 0.0))) == []
