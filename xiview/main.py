"""Application entry point."""

from __future__ import annotations

import os
from functools import partial

from scenekit import version
from scenekit.api.geometry import ColorF
from scenekit.api.logging import configure_logging, get_logger
from scenekit.api.scene import FontKey, PipelineId, Scene
from scenekit.bridge import run_handshake, start
from scenekit.rendering.scene_backend import SceneRenderBackend
from scenekit.rendering.wgpu_presenter import WgpuPresenter
from scenekit.runtime.config import RuntimeConfig, initialize_runtime_config
from scenekit.runtime.errors import FatalStartupError
from scenekit.runtime.event_loop import EventLoop
from scenekit.runtime.frame_lifecycle import FrameCoordinator, FrameNotifier
from scenekit.runtime.logging import shutdown_engine_logging
from scenekit.runtime.wakeup import WakeupChannel
from scenekit.text.font_discovery import resolve_font_path
from scenekit.text.freetype_font import FreetypeFont, load_font_file
from scenekit.window import create_glfw_window
from xiview import scene as demo_scene
from xiview.config import AppConfig, load_app_config, load_default_env_files
from xiview.content import FONT_SCALE, WINDOW_TITLE

logger = get_logger(__name__)


def main() -> None:
    """Run the viewer until its window closes or a quit key is pressed."""
    load_default_env_files()
    os.environ.setdefault("SCENEKIT_WINDOW_TITLE", WINDOW_TITLE)
    runtime = initialize_runtime_config()
    configure_logging(runtime.logging)
    logger.info("viewer_start scenekit=%s", version())
    try:
        reason = run(runtime, load_app_config())
        logger.info("viewer_exit reason=%s", reason)
    except FatalStartupError as exc:
        logger.error("startup_failed error=%s", exc, extra={"details": exc.details})
        raise SystemExit(1) from exc
    finally:
        shutdown_engine_logging()


def run(runtime: RuntimeConfig, app: AppConfig) -> str:
    font_path = resolve_font_path(app.font_path)
    font_bytes, font = load_font_file(font_path)
    logger.info("font_loaded path=%s family=%s bytes=%d", font_path, font.family_name, len(font_bytes))

    if app.core_enabled:
        core = start(app.core_executable, *app.core_args)
        run_handshake(core, app.core_file)

    window = create_glfw_window(
        title=runtime.window.title,
        width=runtime.window.width,
        height=runtime.window.height,
        events_trace_enabled=runtime.window.events_trace_enabled,
        vsync=runtime.render.vsync,
    )
    width, height = window.inner_size()
    v_metrics = font.vertical_metrics(FONT_SCALE)
    logger.info("viewport width=%d height=%d hidpi=%.2f", width, height, window.hidpi_factor())
    logger.info(
        "font_v_metrics ascent=%.2f descent=%.2f line_gap=%.2f",
        v_metrics.ascent,
        v_metrics.descent,
        v_metrics.line_gap,
    )

    window.make_current()
    proxy = window.create_wakeup_proxy()
    channel = WakeupChannel(wake_hook=proxy.wakeup_event_loop)
    try:
        presenter = WgpuPresenter(
            canvas=window.canvas,
            backends=runtime.render.wgpu_backends,
            atlas_size=runtime.render.atlas_size,
        )
    except FatalStartupError:
        window.close()
        raise
    backend = SceneRenderBackend(presenter=presenter, notifier=FrameNotifier(channel))
    try:
        coordinator = FrameCoordinator(
            backend=backend,
            window=window,
            scene_factory=partial(_build_scene, font, app),
            pipeline_id=runtime.render.pipeline_id,
            background_color=ColorF(*runtime.render.background_color),
            epoch_policy=runtime.render.epoch_policy,
        )
        coordinator.start(font_bytes)
        loop = EventLoop(
            window=window,
            coordinator=coordinator,
            channel=channel,
            quit_keys=runtime.window.quit_keys,
            quit_scan_codes=runtime.window.quit_scan_codes,
        )
        return loop.run()
    finally:
        backend.shutdown()
        window.close()


def _build_scene(
    font: FreetypeFont,
    app: AppConfig,
    pipeline_id: PipelineId,
    font_key: FontKey,
    viewport_width: float,
    viewport_height: float,
) -> Scene:
    return demo_scene.build(
        pipeline_id,
        font_key,
        font,
        viewport_width,
        viewport_height,
        lines=app.lines,
        debug_glyph_boxes=app.debug_glyph_boxes,
    )


if __name__ == "__main__":
    main()
