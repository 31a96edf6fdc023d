# engine.py

import logging
import threading
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Callable

import numpy as np

from .core.buffer import PixelBuffer
from .core.errors import CoordinateOutOfRange
from .core.params import BaseColor, ParameterStore, Parameters
from .core.pipeline import run_pipeline
from .core.resolution import PREVIEW_MAX_DIM, ResolutionManager
from .core.sampler import display_to_buffer, sample_color
from .image_io import JPEG_QUALITY, load_image, save_jpeg

logger = logging.getLogger(__name__)

PreviewListener = Callable[[PixelBuffer], None]


class Engine:
    """
    One loaded negative plus its parameters.

    Every parameter change re-renders the preview from the preview original.
    Previews are numbered; a result is only presented if no newer preview was
    requested in the meantime, so a slow stale run can never overwrite a
    fresh one.
    """

    def __init__(self, max_dim: int = PREVIEW_MAX_DIM, params: Parameters | None = None) -> None:
        self.resolution = ResolutionManager(max_dim)
        self.store = ParameterStore(params)
        self.preview: PixelBuffer | None = None

        self._lock = threading.Lock()
        self._generation = 0
        self._preview_listeners: list[PreviewListener] = []
        self._auto_refresh = True

        self.store.subscribe(self._on_params_changed)

    # ---------- Public API ----------

    @property
    def loaded(self) -> bool:
        return self.resolution.loaded

    @property
    def params(self) -> Parameters:
        return self.store.snapshot()

    def on_preview(self, listener: PreviewListener) -> None:
        """Register a presentation callback that receives each accepted preview."""
        self._preview_listeners.append(listener)

    def load(self, source: PixelBuffer | np.ndarray) -> PixelBuffer:
        """
        Take a decoded image, reset all parameters and render the first preview.
        """
        if not isinstance(source, PixelBuffer):
            source = PixelBuffer.from_array(source)

        self.resolution.load(source)
        self.preview = None

        self._auto_refresh = False
        try:
            self.store.reset()
        finally:
            self._auto_refresh = True

        return self.refresh()

    def load_file(self, path: str | Path) -> PixelBuffer:
        return self.load(load_image(path))

    def unload(self) -> None:
        """Drop both originals; previews still rendering are never presented."""
        with self._lock:
            self._generation += 1
            self.resolution.clear()
            self.preview = None

    def update(self, **changes) -> Parameters:
        """Partial parameter replacement; re-renders the preview if loaded."""
        return self.store.update(**changes)

    def begin_preview(self) -> tuple[int, Parameters]:
        """Reserve a preview generation and snapshot the parameters for it."""
        with self._lock:
            self._generation += 1
            return self._generation, self.store.snapshot()

    def present_preview(self, generation: int, buffer: PixelBuffer) -> bool:
        """
        Show buffer if it belongs to the newest requested preview, else drop it.
        """
        with self._lock:
            if generation != self._generation:
                logger.debug("Dropping stale preview %d (latest %d)", generation, self._generation)
                return False
            self.preview = buffer

        for listener in list(self._preview_listeners):
            listener(buffer)
        return True

    def refresh(self) -> PixelBuffer:
        """Synchronously re-render the preview with the current parameters."""
        generation, params = self.begin_preview()
        buffer = self.resolution.render_preview(params)
        self.present_preview(generation, buffer)
        return buffer

    def request_preview(self, executor: Executor) -> Future:
        """
        Render the preview on executor. The future resolves to the rendered
        buffer whether or not it was presented.
        """
        generation, params = self.begin_preview()
        preview_orig = self.resolution.require_preview()

        def _render() -> PixelBuffer:
            return run_pipeline(preview_orig, params)

        future = executor.submit(_render)

        def _done(f: Future) -> None:
            if f.cancelled() or f.exception() is not None:
                return
            self.present_preview(generation, f.result())

        future.add_done_callback(_done)
        return future

    def pick_base_color(self, x: int, y: int) -> bool:
        """
        Sample the film base from preview-space (x, y) of the untouched preview
        original. Out-of-range points are ignored and return False.
        """
        preview_orig = self.resolution.require_preview()
        try:
            color = sample_color(preview_orig, x, y)
        except CoordinateOutOfRange as e:
            logger.warning("Ignoring base-color sample: %s", e)
            return False

        logger.info("Base color set to %s from (%d, %d)", tuple(color), x, y)
        self.store.update(base_color=color)
        return True

    def pick_base_color_display(
        self,
        px: float,
        py: float,
        display_size: tuple[float, float],
    ) -> bool:
        """Same as pick_base_color, with a pointer position on the scaled display."""
        preview_orig = self.resolution.require_preview()
        x, y = display_to_buffer(px, py, display_size, (preview_orig.width, preview_orig.height))
        return self.pick_base_color(x, y)

    def set_base_color(self, color: BaseColor | tuple[int, int, int]) -> Parameters:
        return self.store.update(base_color=color)

    def reset_base(self) -> Parameters:
        return self.store.reset_base()

    def reset_tone(self) -> Parameters:
        return self.store.reset_tone()

    # --- Export

    def export(self) -> PixelBuffer:
        """Full-resolution render with the current parameters."""
        return self.resolution.render_export(self.store.snapshot())

    def export_async(self, executor: Executor) -> Future:
        """Full-resolution render on executor, parameters frozen at submit time."""
        params = self.store.snapshot()
        full = self.resolution.require_full()

        def _render() -> PixelBuffer:
            logger.info("Rendering full resolution %dx%d", full.width, full.height)
            return run_pipeline(full, params)

        return executor.submit(_render)

    def export_jpeg(self, path: str | Path, quality: int = JPEG_QUALITY) -> Path:
        return save_jpeg(self.export(), path, quality)

    # ---------- internals ----------

    def _on_params_changed(self, params: Parameters) -> None:
        if not self._auto_refresh or not self.resolution.loaded:
            return
        self.refresh()
