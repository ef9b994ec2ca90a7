from __future__ import annotations

from dataclasses import dataclass, field, replace

import pytest

from scenekit.api.geometry import ColorF, LayoutSize
from scenekit.api.scene import Epoch, FontKey, PipelineId
from scenekit.rendering.frame_builder import BuiltFrame
from scenekit.rendering.scene_backend import SceneRenderBackend
from scenekit.runtime.errors import SceneBuildError
from scenekit.runtime.frame_lifecycle import FrameNotifier
from scenekit.runtime.wakeup import WakeupChannel
from tests.scenekit.conftest import simple_scene

_BACKGROUND = ColorF(0.3, 0.1, 0.1, 1.0)


@dataclass(slots=True)
class _FakePresenter:
    fonts: list[tuple[FontKey, int]] = field(default_factory=list)
    draws: list[tuple[BuiltFrame | None, tuple[int, int]]] = field(default_factory=list)
    closed: int = 0

    def register_font(self, key: FontKey, data: bytes) -> None:
        self.fonts.append((key, len(data)))

    def draw(self, frame: BuiltFrame | None, device_size: tuple[int, int]) -> None:
        self.draws.append((frame, device_size))

    def close(self) -> None:
        self.closed += 1


@dataclass(slots=True)
class _RecordingNotifier:
    channel: WakeupChannel
    size_changes: list[tuple[PipelineId, LayoutSize | None]] = field(default_factory=list)

    def on_frame_ready(self) -> None:
        self.channel.notify()

    def on_scroll_frame_ready(self, composite_needed: bool) -> None:
        self.channel.notify()

    def on_pipeline_size_changed(self, pipeline_id: PipelineId, size: LayoutSize | None) -> None:
        self.size_changes.append((pipeline_id, size))


def _backend() -> tuple[SceneRenderBackend, _FakePresenter, _RecordingNotifier]:
    presenter = _FakePresenter()
    notifier = _RecordingNotifier(channel=WakeupChannel())
    return SceneRenderBackend(presenter=presenter, notifier=notifier), presenter, notifier


def test_register_raw_font_issues_sequential_keys() -> None:
    backend, presenter, _ = _backend()
    try:
        first = backend.register_raw_font(b"abc")
        second = backend.register_raw_font(b"defg")
    finally:
        backend.shutdown()

    assert first == FontKey(0, 0)
    assert second == FontKey(0, 1)
    assert presenter.fonts == [(FontKey(0, 0), 3), (FontKey(0, 1), 4)]
    assert presenter.closed == 1


def test_first_scene_builds_frame_without_generate() -> None:
    backend, presenter, notifier = _backend()
    try:
        backend.set_root_pipeline(PipelineId(0, 0))
        backend.submit_scene(_BACKGROUND, Epoch(0), LayoutSize(100.0, 80.0), simple_scene())

        assert notifier.channel.wait(timeout=2.0)
        backend.update()
        backend.render((200, 160))
    finally:
        backend.shutdown()

    assert backend.frames_built == 1
    frame = backend.current_frame
    assert frame is not None
    assert frame.background == _BACKGROUND.as_tuple()
    assert presenter.draws == [(frame, (200, 160))]


def test_later_scene_waits_for_generate_frame() -> None:
    backend, _, notifier = _backend()
    backend.submit_scene(_BACKGROUND, Epoch(0), LayoutSize(100.0, 80.0), simple_scene())
    assert notifier.channel.wait(timeout=2.0)
    notifier.channel.consume()

    backend.submit_scene(_BACKGROUND, Epoch(0), LayoutSize(50.0, 40.0), simple_scene(50.0, 40.0))
    backend.shutdown()

    assert backend.frames_built == 1
    assert not notifier.channel.pending


def test_generate_frame_builds_latest_scene_and_reports_size_change() -> None:
    backend, _, notifier = _backend()
    try:
        backend.submit_scene(_BACKGROUND, Epoch(0), LayoutSize(100.0, 80.0), simple_scene())
        assert notifier.channel.wait(timeout=2.0)
        notifier.channel.consume()

        backend.submit_scene(_BACKGROUND, Epoch(0), LayoutSize(50.0, 40.0), simple_scene(50.0, 40.0))
        backend.generate_frame()
        assert notifier.channel.wait(timeout=2.0)
        backend.update()
    finally:
        backend.shutdown()

    assert backend.frames_built == 2
    assert backend.current_frame is not None
    assert backend.current_frame.viewport == LayoutSize(50.0, 40.0)
    assert notifier.size_changes == [(PipelineId(0, 0), LayoutSize(50.0, 40.0))]


def test_scene_for_other_pipeline_is_not_built() -> None:
    backend, _, _ = _backend()
    backend.set_root_pipeline(PipelineId(0, 0))
    backend.submit_scene(
        _BACKGROUND, Epoch(0), LayoutSize(100.0, 80.0), simple_scene(pipeline_id=PipelineId(1, 0))
    )
    backend.shutdown()

    assert backend.frames_built == 0
    assert backend.current_frame is None


def test_scene_after_ignored_first_scene_waits_for_generate_frame() -> None:
    backend, _, _ = _backend()
    backend.set_root_pipeline(PipelineId(0, 0))
    backend.submit_scene(
        _BACKGROUND, Epoch(0), LayoutSize(100.0, 80.0), simple_scene(pipeline_id=PipelineId(1, 0))
    )
    backend.submit_scene(_BACKGROUND, Epoch(0), LayoutSize(100.0, 80.0), simple_scene())
    backend.shutdown()

    assert backend.frames_built == 0


def test_generate_frame_builds_scene_after_ignored_first_scene() -> None:
    backend, _, notifier = _backend()
    try:
        backend.set_root_pipeline(PipelineId(0, 0))
        backend.submit_scene(
            _BACKGROUND, Epoch(0), LayoutSize(100.0, 80.0), simple_scene(pipeline_id=PipelineId(1, 0))
        )
        backend.submit_scene(_BACKGROUND, Epoch(0), LayoutSize(100.0, 80.0), simple_scene())
        backend.generate_frame()
        assert notifier.channel.wait(timeout=2.0)
        backend.update()
    finally:
        backend.shutdown()

    assert backend.frames_built == 1
    assert backend.current_frame is not None
    assert backend.current_frame.pipeline_id == PipelineId(0, 0)


def test_scene_not_covering_viewport_is_rejected() -> None:
    backend, _, _ = _backend()
    scene = replace(simple_scene(100.0, 80.0), viewport=LayoutSize(200.0, 200.0))
    try:
        with pytest.raises(SceneBuildError):
            backend.submit_scene(_BACKGROUND, Epoch(0), LayoutSize(200.0, 200.0), scene)
    finally:
        backend.shutdown()


def test_frame_notifier_wakes_channel_and_ignores_size_changes() -> None:
    channel = WakeupChannel()
    notifier = FrameNotifier(channel)

    notifier.on_pipeline_size_changed(PipelineId(0, 0), LayoutSize(1.0, 1.0))
    assert not channel.pending

    notifier.on_frame_ready()
    notifier.on_scroll_frame_ready(True)
    assert channel.consume()
    assert channel.notify_count == 2
