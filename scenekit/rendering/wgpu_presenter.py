"""WGPU presenter drawing built frames onto a rendercanvas surface."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any

import freetype
import numpy as np
import wgpu

from scenekit.api.scene import FontKey
from scenekit.rendering.frame_builder import BuiltFrame, DrawRect, GlyphDraw
from scenekit.runtime.errors import BackendInitError, FontLoadError

_LOG = logging.getLogger("scenekit.rendering.wgpu")

_DEFAULT_SURFACE_FORMAT = "bgra8unorm-srgb"
_RECT_FLOATS_PER_VERTEX = 6
_TEXT_FLOATS_PER_VERTEX = 8
_MIN_VERTEX_BUFFER_BYTES = 64 * 1024


@dataclass(frozen=True, slots=True)
class _GlyphAtlasEntry:
    u0: float
    v0: float
    u1: float
    v1: float
    width: float
    height: float
    bearing_x: float
    bearing_y: float


@dataclass(frozen=True, slots=True)
class TextQuad:
    """Device-space glyph quad with atlas coordinates."""

    x: float
    y: float
    w: float
    h: float
    u0: float
    v0: float
    u1: float
    v1: float
    color: tuple[float, float, float, float]


@dataclass(slots=True)
class WgpuPresenter:
    """Owns adapter, device, pipelines and the glyph atlas for one canvas."""

    canvas: Any
    backends: tuple[str, ...] = ("vulkan", "metal", "dx12")
    atlas_size: int = 2048
    _adapter: Any = field(init=False, default=None)
    _device: Any = field(init=False, default=None)
    _queue: Any = field(init=False, default=None)
    _context: Any = field(init=False, default=None)
    _selected_backend: str = field(init=False, default="unknown")
    _surface_format: str = field(init=False, default=_DEFAULT_SURFACE_FORMAT)
    _geometry_pipeline: Any = field(init=False, default=None)
    _text_pipeline: Any = field(init=False, default=None)
    _text_bind_group: Any = field(init=False, default=None)
    _atlas_texture: Any = field(init=False, default=None)
    _atlas_pixels: bytearray = field(init=False, default_factory=bytearray)
    _atlas_cursor_x: int = field(init=False, default=1)
    _atlas_cursor_y: int = field(init=False, default=1)
    _atlas_row_height: int = field(init=False, default=0)
    _atlas_dirty: bool = field(init=False, default=False)
    _atlas_full_logged: bool = field(init=False, default=False)
    _faces: dict[FontKey, Any] = field(init=False, default_factory=dict)
    _glyph_cache: dict[tuple[FontKey, int, int], _GlyphAtlasEntry | None] = field(
        init=False, default_factory=dict
    )
    _vertex_buffers: dict[str, tuple[Any, int]] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        try:
            self._adapter, self._selected_backend = self._request_adapter()
            self._device = self._adapter.request_device_sync(label="scenekit.wgpu.device")
            self._queue = self._device.queue
            self._context = self.canvas.get_context("wgpu")
            if self._context is None:
                raise BackendInitError("canvas did not provide a wgpu context", details={})
            self._surface_format = self._resolve_surface_format()
            self._configure_context()
            self._setup_pipelines()
            self._setup_text_resources()
        except BackendInitError:
            raise
        except Exception as exc:
            raise BackendInitError(
                "wgpu backend initialization failed",
                details={
                    "selected_backend": self._selected_backend,
                    "surface_format": self._surface_format,
                    "exception_type": exc.__class__.__name__,
                    "exception_message": str(exc),
                },
            ) from exc
        _LOG.info(
            "wgpu_ready backend=%s format=%s adapter=%s",
            self._selected_backend,
            self._surface_format,
            self.adapter_summary,
        )

    @property
    def adapter_summary(self) -> str:
        info = getattr(self._adapter, "info", None)
        if isinstance(info, dict):
            parts = [str(info.get(key, "")) for key in ("vendor", "device", "backend_type")]
            return " ".join(part for part in parts if part) or "unknown"
        return "unknown"

    def register_font(self, key: FontKey, data: bytes) -> None:
        try:
            self._faces[key] = freetype.Face(io.BytesIO(data))
        except (freetype.FT_Exception, OSError, ValueError) as exc:
            raise FontLoadError(
                "backend font registration failed",
                details={"font_key": repr(key), "exception_message": str(exc)},
            ) from exc

    def draw(self, frame: BuiltFrame | None, device_size: tuple[int, int]) -> None:
        width, height = int(device_size[0]), int(device_size[1])
        if width <= 0 or height <= 0:
            return
        texture = self._context.get_current_texture()
        view = texture.create_view()
        background = frame.background if frame is not None and frame.background else (0.0, 0.0, 0.0, 1.0)
        rect_data = np.empty((0, _RECT_FLOATS_PER_VERTEX), dtype=np.float32)
        text_data = np.empty((0, _TEXT_FLOATS_PER_VERTEX), dtype=np.float32)
        if frame is not None and frame.viewport.width > 0 and frame.viewport.height > 0:
            layout_w = float(frame.viewport.width)
            layout_h = float(frame.viewport.height)
            rect_data = rect_vertices(frame.rects, width=layout_w, height=layout_h)
            quads = self._glyph_quads(frame.glyphs, device_scale=width / layout_w)
            text_data = text_vertices(quads, width=float(width), height=float(height))
        self._upload_atlas_if_needed()

        encoder = self._device.create_command_encoder(label="scenekit.wgpu.frame")
        render_pass = encoder.begin_render_pass(
            color_attachments=[
                {
                    "view": view,
                    "resolve_target": None,
                    "clear_value": background,
                    "load_op": "clear",
                    "store_op": "store",
                }
            ]
        )
        if len(rect_data):
            buffer = self._upload_vertices("rects", rect_data)
            render_pass.set_pipeline(self._geometry_pipeline)
            render_pass.set_vertex_buffer(0, buffer)
            render_pass.draw(int(len(rect_data)), 1, 0, 0)
        if len(text_data):
            buffer = self._upload_vertices("text", text_data)
            render_pass.set_pipeline(self._text_pipeline)
            render_pass.set_bind_group(0, self._text_bind_group)
            render_pass.set_vertex_buffer(0, buffer)
            render_pass.draw(int(len(text_data)), 1, 0, 0)
        render_pass.end()
        self._queue.submit([encoder.finish()])

    def close(self) -> None:
        self._vertex_buffers.clear()
        self._glyph_cache.clear()
        self._faces.clear()

    def _request_adapter(self) -> tuple[Any, str]:
        selected_backend = "unknown"
        adapter = None
        for backend_name in self.backends or ("default",):
            selected_backend = str(backend_name)
            try:
                adapter = wgpu.gpu.request_adapter_sync(
                    power_preference="high-performance",
                    backend=backend_name,
                )
            except TypeError:
                adapter = wgpu.gpu.request_adapter_sync(power_preference="high-performance")
            if adapter is not None:
                break
        if adapter is None:
            raise BackendInitError(
                "wgpu adapter request returned None",
                details={"attempted_backends": tuple(self.backends)},
            )
        return adapter, selected_backend

    def _resolve_surface_format(self) -> str:
        preferred = getattr(self._context, "get_preferred_format", None)
        if callable(preferred):
            value = preferred(self._adapter)
            if value:
                return str(value)
        return _DEFAULT_SURFACE_FORMAT

    def _configure_context(self) -> None:
        usage = wgpu.TextureUsage.RENDER_ATTACHMENT
        try:
            self._context.configure(
                device=self._device,
                format=self._surface_format,
                usage=usage,
                alpha_mode="opaque",
            )
        except TypeError:
            self._context.configure(device=self._device, format=self._surface_format)

    def _setup_pipelines(self) -> None:
        geometry_shader = self._device.create_shader_module(code=_GEOMETRY_WGSL)
        text_shader = self._device.create_shader_module(code=_TEXT_WGSL)
        self._geometry_pipeline = self._device.create_render_pipeline(
            **_pipeline_descriptor(
                shader=geometry_shader,
                surface_format=self._surface_format,
                array_stride=_RECT_FLOATS_PER_VERTEX * 4,
                attributes=(
                    {"shader_location": 0, "offset": 0, "format": "float32x2"},
                    {"shader_location": 1, "offset": 8, "format": "float32x4"},
                ),
            )
        )
        self._text_pipeline = self._device.create_render_pipeline(
            **_pipeline_descriptor(
                shader=text_shader,
                surface_format=self._surface_format,
                array_stride=_TEXT_FLOATS_PER_VERTEX * 4,
                attributes=(
                    {"shader_location": 0, "offset": 0, "format": "float32x2"},
                    {"shader_location": 1, "offset": 8, "format": "float32x2"},
                    {"shader_location": 2, "offset": 16, "format": "float32x4"},
                ),
            )
        )

    def _setup_text_resources(self) -> None:
        size = int(self.atlas_size)
        self._atlas_pixels = bytearray(size * size)
        self._atlas_texture = self._device.create_texture(
            size=(size, size, 1),
            dimension="2d",
            format="r8unorm",
            usage=wgpu.TextureUsage.TEXTURE_BINDING | wgpu.TextureUsage.COPY_DST,
        )
        sampler = self._device.create_sampler(
            mag_filter="linear",
            min_filter="linear",
            mipmap_filter="nearest",
            address_mode_u="clamp-to-edge",
            address_mode_v="clamp-to-edge",
        )
        self._text_bind_group = self._device.create_bind_group(
            layout=self._text_pipeline.get_bind_group_layout(0),
            entries=[
                {"binding": 0, "resource": self._atlas_texture.create_view()},
                {"binding": 1, "resource": sampler},
            ],
        )

    def _glyph_quads(self, glyphs: tuple[GlyphDraw, ...], *, device_scale: float) -> tuple[TextQuad, ...]:
        quads: list[TextQuad] = []
        for glyph in glyphs:
            size_px = max(1, int(round(glyph.size_px * device_scale)))
            entry = self._glyph_atlas_entry(glyph.font_key, glyph.glyph_index, size_px)
            if entry is None or entry.width <= 0.0 or entry.height <= 0.0:
                continue
            quad = TextQuad(
                x=glyph.x * device_scale + entry.bearing_x,
                y=glyph.y * device_scale - entry.bearing_y,
                w=entry.width,
                h=entry.height,
                u0=entry.u0,
                v0=entry.v0,
                u1=entry.u1,
                v1=entry.v1,
                color=glyph.color,
            )
            clip = glyph.clip
            clipped = clip_quad(
                quad,
                clip.x * device_scale,
                clip.y * device_scale,
                clip.max_x * device_scale,
                clip.max_y * device_scale,
            )
            if clipped is not None:
                quads.append(clipped)
        return tuple(quads)

    def _glyph_atlas_entry(self, font_key: FontKey, glyph_index: int, size_px: int) -> _GlyphAtlasEntry | None:
        key = (font_key, int(glyph_index), int(size_px))
        if key in self._glyph_cache:
            return self._glyph_cache[key]
        face = self._faces.get(font_key)
        if face is None:
            _LOG.warning("glyph_for_unregistered_font key=%s", font_key)
            self._glyph_cache[key] = None
            return None
        width, rows, left, top, alpha = _rasterize_glyph(face, glyph_index, size_px)
        if width <= 0 or rows <= 0:
            entry = _GlyphAtlasEntry(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, float(left), float(top))
            self._glyph_cache[key] = entry
            return entry
        atlas_xy = self._pack_atlas_region(width=width, height=rows)
        if atlas_xy is None:
            if not self._atlas_full_logged:
                _LOG.warning("glyph_atlas_full size=%d", self.atlas_size)
                self._atlas_full_logged = True
            return None
        dst_x, dst_y = atlas_xy
        self._blit_alpha_to_atlas(x=dst_x, y=dst_y, width=width, height=rows, data=alpha)
        atlas = float(self.atlas_size)
        entry = _GlyphAtlasEntry(
            u0=dst_x / atlas,
            v0=dst_y / atlas,
            u1=(dst_x + width) / atlas,
            v1=(dst_y + rows) / atlas,
            width=float(width),
            height=float(rows),
            bearing_x=float(left),
            bearing_y=float(top),
        )
        self._glyph_cache[key] = entry
        return entry

    def _pack_atlas_region(self, *, width: int, height: int) -> tuple[int, int] | None:
        atlas = int(self.atlas_size)
        if width + 2 >= atlas or height + 2 >= atlas:
            return None
        cursor_x = self._atlas_cursor_x
        cursor_y = self._atlas_cursor_y
        row_h = self._atlas_row_height
        if cursor_x + width + 1 >= atlas:
            cursor_x = 1
            cursor_y += row_h + 1
            row_h = 0
        if cursor_y + height + 1 >= atlas:
            return None
        self._atlas_cursor_x = cursor_x + width + 1
        self._atlas_cursor_y = cursor_y
        self._atlas_row_height = max(row_h, height)
        return (cursor_x, cursor_y)

    def _blit_alpha_to_atlas(self, *, x: int, y: int, width: int, height: int, data: bytes) -> None:
        atlas = int(self.atlas_size)
        for row in range(height):
            dst = (y + row) * atlas + x
            src = row * width
            self._atlas_pixels[dst : dst + width] = data[src : src + width]
        self._atlas_dirty = True

    def _upload_atlas_if_needed(self) -> None:
        if not self._atlas_dirty:
            return
        size = int(self.atlas_size)
        self._queue.write_texture(
            {"texture": self._atlas_texture, "origin": (0, 0, 0)},
            bytes(self._atlas_pixels),
            {"offset": 0, "bytes_per_row": size, "rows_per_image": size},
            (size, size, 1),
        )
        self._atlas_dirty = False

    def _upload_vertices(self, stream: str, data: np.ndarray) -> Any:
        raw = np.ascontiguousarray(data, dtype=np.float32).tobytes()
        buffer, capacity = self._vertex_buffers.get(stream, (None, 0))
        if buffer is None or capacity < len(raw):
            capacity = max(_MIN_VERTEX_BUFFER_BYTES, capacity * 2, len(raw))
            buffer = self._device.create_buffer(
                size=capacity,
                usage=wgpu.BufferUsage.VERTEX | wgpu.BufferUsage.COPY_DST,
            )
            self._vertex_buffers[stream] = (buffer, capacity)
        self._queue.write_buffer(buffer, 0, raw)
        return buffer


def rect_vertices(rects: tuple[DrawRect, ...], *, width: float, height: float) -> np.ndarray:
    """Two triangles per rect in NDC, interleaved as (x, y, r, g, b, a)."""
    if not rects:
        return np.empty((0, _RECT_FLOATS_PER_VERTEX), dtype=np.float32)
    data = np.array([(r.x, r.y, r.w, r.h, *r.color) for r in rects], dtype=np.float32)
    x0 = data[:, 0] / width * 2.0 - 1.0
    x1 = (data[:, 0] + data[:, 2]) / width * 2.0 - 1.0
    y0 = 1.0 - data[:, 1] / height * 2.0
    y1 = 1.0 - (data[:, 1] + data[:, 3]) / height * 2.0
    out = np.empty((len(rects), 6, _RECT_FLOATS_PER_VERTEX), dtype=np.float32)
    for corner, (cx, cy) in enumerate(((x0, y0), (x1, y0), (x0, y1), (x0, y1), (x1, y0), (x1, y1))):
        out[:, corner, 0] = cx
        out[:, corner, 1] = cy
        out[:, corner, 2:6] = data[:, 4:8]
    return out.reshape(-1, _RECT_FLOATS_PER_VERTEX)


def text_vertices(quads: tuple[TextQuad, ...], *, width: float, height: float) -> np.ndarray:
    """Two triangles per glyph quad, interleaved as (x, y, u, v, r, g, b, a)."""
    if not quads:
        return np.empty((0, _TEXT_FLOATS_PER_VERTEX), dtype=np.float32)
    data = np.array(
        [(q.x, q.y, q.w, q.h, q.u0, q.v0, q.u1, q.v1, *q.color) for q in quads],
        dtype=np.float32,
    )
    x0 = data[:, 0] / width * 2.0 - 1.0
    x1 = (data[:, 0] + data[:, 2]) / width * 2.0 - 1.0
    y0 = 1.0 - data[:, 1] / height * 2.0
    y1 = 1.0 - (data[:, 1] + data[:, 3]) / height * 2.0
    u0, v0, u1, v1 = data[:, 4], data[:, 5], data[:, 6], data[:, 7]
    corners = (
        (x0, y0, u0, v0),
        (x1, y0, u1, v0),
        (x0, y1, u0, v1),
        (x0, y1, u0, v1),
        (x1, y0, u1, v0),
        (x1, y1, u1, v1),
    )
    out = np.empty((len(quads), 6, _TEXT_FLOATS_PER_VERTEX), dtype=np.float32)
    for corner, (cx, cy, cu, cv) in enumerate(corners):
        out[:, corner, 0] = cx
        out[:, corner, 1] = cy
        out[:, corner, 2] = cu
        out[:, corner, 3] = cv
        out[:, corner, 4:8] = data[:, 8:12]
    return out.reshape(-1, _TEXT_FLOATS_PER_VERTEX)


def clip_quad(quad: TextQuad, x0: float, y0: float, x1: float, y1: float) -> TextQuad | None:
    """Crop a quad to a device-space clip rect, shrinking its atlas window to match."""
    left = max(quad.x, x0)
    top = max(quad.y, y0)
    right = min(quad.x + quad.w, x1)
    bottom = min(quad.y + quad.h, y1)
    if right <= left or bottom <= top:
        return None
    if left == quad.x and top == quad.y and right == quad.x + quad.w and bottom == quad.y + quad.h:
        return quad
    du = (quad.u1 - quad.u0) / quad.w
    dv = (quad.v1 - quad.v0) / quad.h
    return TextQuad(
        x=left,
        y=top,
        w=right - left,
        h=bottom - top,
        u0=quad.u0 + (left - quad.x) * du,
        v0=quad.v0 + (top - quad.y) * dv,
        u1=quad.u0 + (right - quad.x) * du,
        v1=quad.v0 + (bottom - quad.y) * dv,
        color=quad.color,
    )


def _rasterize_glyph(face: Any, glyph_index: int, size_px: int) -> tuple[int, int, int, int, bytes]:
    face.set_pixel_sizes(0, int(max(1, size_px)))
    face.load_glyph(int(glyph_index), freetype.FT_LOAD_RENDER)
    glyph = face.glyph
    bitmap = glyph.bitmap
    width = int(bitmap.width)
    rows = int(bitmap.rows)
    left = int(glyph.bitmap_left)
    top = int(glyph.bitmap_top)
    if width <= 0 or rows <= 0:
        return (0, 0, left, top, b"")
    pitch = int(bitmap.pitch)
    raw = bytes(bitmap.buffer)
    if pitch == width:
        return (width, rows, left, top, raw[: width * rows])
    out = bytearray()
    row_pitch = max(width, abs(pitch))
    for row in range(rows):
        start = row * row_pitch if pitch >= 0 else (rows - 1 - row) * row_pitch
        out.extend(raw[start : start + width])
    return (width, rows, left, top, bytes(out))


def _pipeline_descriptor(
    *,
    shader: Any,
    surface_format: str,
    array_stride: int,
    attributes: tuple[dict[str, object], ...],
) -> dict[str, object]:
    return {
        "layout": "auto",
        "vertex": {
            "module": shader,
            "entry_point": "vs_main",
            "buffers": [
                {
                    "array_stride": int(array_stride),
                    "step_mode": "vertex",
                    "attributes": list(attributes),
                }
            ],
        },
        "fragment": {
            "module": shader,
            "entry_point": "fs_main",
            "targets": [
                {
                    "format": surface_format,
                    "blend": {
                        "color": {
                            "src_factor": "src-alpha",
                            "dst_factor": "one-minus-src-alpha",
                            "operation": "add",
                        },
                        "alpha": {
                            "src_factor": "one",
                            "dst_factor": "one-minus-src-alpha",
                            "operation": "add",
                        },
                    },
                    "write_mask": 0xF,
                }
            ],
        },
        "primitive": {"topology": "triangle-list"},
    }


_GEOMETRY_WGSL = """
struct VsIn {
    @location(0) pos: vec2<f32>,
    @location(1) color: vec4<f32>,
};

struct VsOut {
    @builtin(position) position: vec4<f32>,
    @location(0) color: vec4<f32>,
};

@vertex
fn vs_main(input: VsIn) -> VsOut {
    var out: VsOut;
    out.position = vec4<f32>(input.pos, 0.0, 1.0);
    out.color = input.color;
    return out;
}

@fragment
fn fs_main(input: VsOut) -> @location(0) vec4<f32> {
    return input.color;
}
"""


_TEXT_WGSL = """
struct VsIn {
    @location(0) pos: vec2<f32>,
    @location(1) uv: vec2<f32>,
    @location(2) color: vec4<f32>,
};

struct VsOut {
    @builtin(position) position: vec4<f32>,
    @location(0) uv: vec2<f32>,
    @location(1) color: vec4<f32>,
};

@group(0) @binding(0) var atlas_tex: texture_2d<f32>;
@group(0) @binding(1) var atlas_sampler: sampler;

@vertex
fn vs_main(input: VsIn) -> VsOut {
    var out: VsOut;
    out.position = vec4<f32>(input.pos, 0.0, 1.0);
    out.uv = input.uv;
    out.color = input.color;
    return out;
}

@fragment
fn fs_main(input: VsOut) -> @location(0) vec4<f32> {
    let alpha = textureSample(atlas_tex, atlas_sampler, input.uv).r;
    return vec4<f32>(input.color.rgb, input.color.a * alpha);
}
"""


__all__ = ["TextQuad", "WgpuPresenter", "clip_quad", "rect_vertices", "text_vertices"]
