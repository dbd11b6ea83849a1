"""Background rendering with debounce and last-write-wins results.

AIDEV-NOTE: Every request bumps a generation counter. A thread only gets
to publish its sketch if its generation is still the newest one when it
finishes, so a slow render for stale settings can never overwrite a newer
result. Renders are pure, so stale ones are simply dropped, not awaited.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal

from ..image_processing import PixelBuffer, render
from ..image_processing.texture import DEFAULT_TEXTURE_OPACITY, apply_texture, get_texture
from ..models import RENDER_DEBOUNCE_MS, BlendMode, SketchOptions, Texture

logger = logging.getLogger(__name__)


class RenderThread(QThread):
    """Background thread for sketch rendering to avoid blocking UI."""

    rendered = pyqtSignal(int, object)  # generation, PixelBuffer
    error = pyqtSignal(int, str)  # generation, error message

    def __init__(
        self,
        generation: int,
        image: PixelBuffer,
        options: SketchOptions,
        texture: Texture | None = None,
        blend_mode: BlendMode | str = BlendMode.MULTIPLY,
        texture_opacity: float = DEFAULT_TEXTURE_OPACITY,
    ):
        super().__init__()
        self.generation = generation
        self.image = image
        self.options = options
        self.texture = texture
        self.blend_mode = blend_mode
        self.texture_opacity = texture_opacity

    def run(self):
        """Execute the render in background."""
        try:
            sketch = render(self.image, self.options)
            result = apply_texture(
                sketch, self.texture, self.blend_mode, self.texture_opacity
            )
            self.rendered.emit(self.generation, result)
        except Exception as e:
            self.error.emit(self.generation, str(e))


class RenderScheduler(QObject):
    """Debounces render requests and publishes only the newest result."""

    sketch_ready = pyqtSignal(object)  # PixelBuffer
    render_failed = pyqtSignal(str)  # Error message

    def __init__(self, debounce_ms: int = RENDER_DEBOUNCE_MS, parent: QObject | None = None):
        super().__init__(parent)
        self._generation = 0
        self._pending: dict | None = None
        self._threads: set[RenderThread] = set()

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(debounce_ms)
        self._timer.timeout.connect(self._start_pending)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_busy(self) -> bool:
        return bool(self._threads) or self._timer.isActive()

    def request(
        self,
        image: PixelBuffer,
        options: SketchOptions,
        texture: str | Texture | None = None,
        blend_mode: BlendMode | str = BlendMode.MULTIPLY,
        texture_opacity: float = DEFAULT_TEXTURE_OPACITY,
    ):
        """Queue a render; restarts the debounce timer if one is pending."""
        if not isinstance(texture, Texture):
            texture = get_texture(texture)
        self._pending = {
            "image": image,
            "options": options,
            "texture": texture,
            "blend_mode": blend_mode,
            "texture_opacity": texture_opacity,
        }
        # Anything already running is now stale
        self._generation += 1
        self._timer.start()

    def render_now(self) -> RenderThread | None:
        """Skip the debounce and start the pending render immediately."""
        self._timer.stop()
        return self._start_pending()

    def cancel(self):
        """Drop the pending request and ignore results still in flight."""
        self._timer.stop()
        self._pending = None
        self._generation += 1

    def _start_pending(self) -> RenderThread | None:
        if self._pending is None:
            return None

        thread = RenderThread(self._generation, **self._pending)
        self._pending = None

        thread.rendered.connect(self._on_rendered)
        thread.error.connect(self._on_error)
        thread.finished.connect(lambda: self._release(thread))
        self._threads.add(thread)
        thread.start()
        return thread

    def _release(self, thread: RenderThread):
        thread.wait()
        self._threads.discard(thread)

    def _on_rendered(self, generation: int, result: PixelBuffer):
        """Publish the result only if no newer request has arrived."""
        if generation != self._generation:
            logger.debug(
                f"Discarding stale render {generation} (latest {self._generation})"
            )
            return
        self.sketch_ready.emit(result)

    def _on_error(self, generation: int, error_msg: str):
        if generation != self._generation:
            return
        # format error message
        pretty_msg = error_msg.replace("\n", " ").strip()
        logger.warning(f"Render failed: {pretty_msg}")
        self.render_failed.emit(pretty_msg)

    def wait_for_all(self, timeout_ms: int = 30000) -> bool:
        """Block until running threads finish. Returns False on timeout."""
        return all(thread.wait(timeout_ms) for thread in list(self._threads))
