from __future__ import annotations

from dataclasses import dataclass, field

import pytest

import xiview.main as app_main
from scenekit.api.window import WindowCloseEvent
from scenekit.rendering.frame_builder import BuiltFrame
from scenekit.runtime.config import load_runtime_config
from scenekit.runtime.errors import FontLoadError
from scenekit.runtime.event_loop import EXIT_CLOSE
from tests.scenekit.conftest import FakeFont, FakeWindow
from xiview.config import load_app_config


@dataclass(frozen=True, slots=True)
class _NamedFont(FakeFont):
    @property
    def family_name(self) -> str:
        return "Fake Sans"


@dataclass(slots=True)
class _CanvasWindow(FakeWindow):
    canvas: object = None
    proxies: int = 0

    def create_wakeup_proxy(self) -> object:
        self.proxies += 1
        return _Proxy()


class _Proxy:
    def wakeup_event_loop(self) -> None:
        return


@dataclass(slots=True)
class _Presenter:
    canvas: object
    backends: tuple[str, ...]
    atlas_size: int
    fonts: list[object] = field(default_factory=list)
    draws: list[tuple[BuiltFrame | None, tuple[int, int]]] = field(default_factory=list)
    closed: int = 0

    def register_font(self, key, data: bytes) -> None:
        self.fonts.append(key)

    def draw(self, frame, device_size) -> None:
        self.draws.append((frame, device_size))

    def close(self) -> None:
        self.closed += 1


def test_run_wires_font_window_backend_and_loop(monkeypatch: pytest.MonkeyPatch) -> None:
    window = _CanvasWindow(canvas="canvas", batches=[(), (WindowCloseEvent(),)])
    presenters: list[_Presenter] = []
    window_kwargs: dict[str, object] = {}

    def create_window(**kwargs):
        window_kwargs.update(kwargs)
        return window

    def make_presenter(**kwargs):
        presenter = _Presenter(**kwargs)
        presenters.append(presenter)
        return presenter

    monkeypatch.setattr(app_main, "resolve_font_path", lambda configured: "/fonts/Fake.ttf")
    monkeypatch.setattr(app_main, "load_font_file", lambda path: (b"font-bytes", _NamedFont()))
    monkeypatch.setattr(app_main, "create_glfw_window", create_window)
    monkeypatch.setattr(app_main, "WgpuPresenter", make_presenter)

    runtime = load_runtime_config(env={"SCENEKIT_WINDOW_TITLE": "WebRender Sample"})
    reason = app_main.run(runtime, load_app_config(env={}))

    assert reason == EXIT_CLOSE
    assert window_kwargs["title"] == "WebRender Sample"
    assert window_kwargs["width"] == 800
    presenter = presenters[0]
    assert presenter.canvas == "canvas"
    assert len(presenter.fonts) == 1
    assert presenter.closed == 1
    assert len(presenter.draws) == 1
    assert window.swaps == 1
    assert window.closed == 1
    assert window.proxies == 1


def test_run_starts_core_when_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, tuple]] = []
    window = _CanvasWindow(canvas="canvas", batches=[(WindowCloseEvent(),)])

    def fake_start(executable, *args):
        calls.append(("start", (executable, *args)))
        return "core"

    def fake_handshake(core, path):
        calls.append(("handshake", (core, path)))
        return ("{}", "{}")

    monkeypatch.setattr(app_main, "resolve_font_path", lambda configured: "/fonts/Fake.ttf")
    monkeypatch.setattr(app_main, "load_font_file", lambda path: (b"font", _NamedFont()))
    monkeypatch.setattr(app_main, "start", fake_start)
    monkeypatch.setattr(app_main, "run_handshake", fake_handshake)
    monkeypatch.setattr(app_main, "create_glfw_window", lambda **kwargs: window)
    monkeypatch.setattr(app_main, "WgpuPresenter", lambda **kwargs: _Presenter(**kwargs))

    app = load_app_config(
        env={"XIVIEW_CORE_ENABLED": "1", "XIVIEW_CORE_ARGS": "--quiet", "XIVIEW_CORE_FILE": "a.txt"}
    )
    app_main.run(load_runtime_config(env={}), app)

    assert calls == [("start", ("xi-core", "--quiet")), ("handshake", ("core", "a.txt"))]


def test_main_exits_nonzero_on_fatal_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing_font(configured):
        raise FontLoadError("font discovery failed", details={"font_candidates_checked": (configured,)})

    monkeypatch.setattr(app_main, "load_default_env_files", lambda: None)
    monkeypatch.setattr(app_main, "configure_logging", lambda config: None)
    monkeypatch.setattr(app_main, "shutdown_engine_logging", lambda: None)
    monkeypatch.setattr(app_main, "resolve_font_path", missing_font)
    monkeypatch.setenv("SCENEKIT_WINDOW_TITLE", "test")

    with pytest.raises(SystemExit) as exc_info:
        app_main.main()

    assert exc_info.value.code == 1
